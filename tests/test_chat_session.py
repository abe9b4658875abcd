from __future__ import annotations

import asyncio
from typing import Any, Dict, List

import pytest

from models.session_models import ChatMessage, SessionStatus
from services.chat.chat_session import CANCELLED_MARKER, FAILURE_NOTICE, ChatSession
from utils.errors import SessionBusyError, StreamTransportError

_END = object()


class ScriptedStreamer:
	"""Yields a fixed list of chunks, optionally failing afterwards."""

	def __init__(self, *replies: List[Any]) -> None:
		self.replies = list(replies)
		self.calls: List[Dict[str, Any]] = []

	async def stream(self, text, history):
		self.calls.append({"text": text, "history": list(history)})
		for chunk in self.replies.pop(0):
			if isinstance(chunk, BaseException):
				raise chunk
			await asyncio.sleep(0)
			yield chunk


class FeedStreamer:
	"""Yields whatever the test pushes into the queue of the current call."""

	def __init__(self) -> None:
		self.feeds: List[asyncio.Queue] = []
		self.calls: List[Dict[str, Any]] = []

	async def stream(self, text, history):
		self.calls.append({"text": text, "history": list(history)})
		feed: asyncio.Queue = asyncio.Queue()
		self.feeds.append(feed)
		while True:
			item = await feed.get()
			if item is _END:
				return
			if isinstance(item, BaseException):
				raise item
			yield item


class StubbornStreamer(FeedStreamer):
	"""Ignores cancellation once and keeps producing a chunk."""

	async def stream(self, text, history):
		feed: asyncio.Queue = asyncio.Queue()
		self.feeds.append(feed)
		yield await feed.get()
		try:
			await feed.get()
		except asyncio.CancelledError:
			pass
		yield "late chunk"


class LingeringStreamer(FeedStreamer):
	"""First stream survives cancellation and emits one more chunk when fed."""

	async def stream(self, text, history):
		if self.feeds:
			async for chunk in super().stream(text, history):
				yield chunk
			return
		feed: asyncio.Queue = asyncio.Queue()
		self.feeds.append(feed)
		yield await feed.get()
		try:
			await feed.get()
		except asyncio.CancelledError:
			yield await feed.get()


async def settle(rounds: int = 10) -> None:
	for _ in range(rounds):
		await asyncio.sleep(0)


def assistant(session: ChatSession) -> ChatMessage:
	return [message for message in session.messages if message.role == "assistant"][-1]


@pytest.mark.asyncio
async def test_streamed_chunks_accumulate_in_order():
	session = ChatSession(ScriptedStreamer(["Hel", "lo, ", "world"]))
	events: List[Dict[str, Any]] = []
	session.subscribe(events.append)

	handle = session.submit("  hi there  ")
	assert handle is not None
	assert session.status == SessionStatus.SENDING
	await handle.wait()

	user, reply = session.messages
	assert user.role == "user" and user.content == "hi there"
	assert reply.id == handle.message_id
	assert reply.content == "Hello, world"
	assert reply.streaming is False
	assert session.status == SessionStatus.IDLE
	assert session.last_outcome == SessionStatus.COMPLETED

	contents = [
		event["message"]["content"]
		for event in events
		if event["type"] == "message.updated" and event["message"]["id"] == reply.id
	]
	assert contents == ["", "Hel", "Hello, ", "Hello, world", "Hello, world"]
	assert events[-1]["type"] == "request.finished"
	assert events[-1]["status"] == "completed"


@pytest.mark.asyncio
async def test_status_is_streaming_after_first_chunk():
	streamer = FeedStreamer()
	session = ChatSession(streamer)
	handle = session.submit("hello")
	await settle()
	assert session.status == SessionStatus.SENDING

	streamer.feeds[0].put_nowait("Hi")
	await settle()
	assert session.status == SessionStatus.STREAMING
	assert assistant(session).streaming is True

	streamer.feeds[0].put_nowait(_END)
	await handle.wait()
	assert session.status == SessionStatus.IDLE


@pytest.mark.asyncio
async def test_empty_submission_is_ignored():
	streamer = ScriptedStreamer()
	session = ChatSession(streamer)

	assert session.submit("   ") is None
	assert session.submit("") is None
	assert session.messages == []
	assert streamer.calls == []


@pytest.mark.asyncio
async def test_only_one_request_in_flight():
	streamer = FeedStreamer()
	session = ChatSession(streamer)
	first = session.submit("first")
	await settle()

	assert session.submit("second") is None
	assert [message.content for message in session.messages] == ["first", ""]
	with pytest.raises(SessionBusyError):
		session.edit_message(session.messages[0].id, "changed")

	streamer.feeds[0].put_nowait("done")
	streamer.feeds[0].put_nowait(_END)
	await first.wait()

	second = session.submit("second")
	assert second is not None
	await settle()
	assert len(streamer.calls) == 2
	session.cancel()
	await second.wait()


@pytest.mark.asyncio
async def test_cancel_keeps_partial_reply_and_is_final():
	streamer = FeedStreamer()
	session = ChatSession(streamer)
	handle = session.submit("tell me about aspirin")
	await settle()
	streamer.feeds[0].put_nowait("Aspirin is")
	await settle()

	assert session.cancel() is True
	reply = assistant(session)
	assert reply.content == "Aspirin is"
	assert reply.streaming is False
	assert handle.alive is False
	assert handle.cancelled is True
	assert session.status == SessionStatus.IDLE
	assert session.last_outcome == SessionStatus.CANCELLED

	await handle.wait()
	streamer.feeds[0].put_nowait(" an NSAID")
	await settle()
	assert reply.content == "Aspirin is"
	assert session.cancel() is False


@pytest.mark.asyncio
async def test_cancel_before_first_chunk_marks_reply():
	streamer = FeedStreamer()
	session = ChatSession(streamer)
	handle = session.submit("hello")
	await settle()

	session.cancel()
	await handle.wait()
	assert assistant(session).content == CANCELLED_MARKER
	assert assistant(session).streaming is False


@pytest.mark.asyncio
async def test_cancel_when_idle_is_a_no_op():
	session = ChatSession(ScriptedStreamer())
	assert session.cancel() is False
	assert session.last_outcome is None
	assert session.messages == []


@pytest.mark.asyncio
async def test_chunks_produced_after_cancel_are_discarded():
	streamer = StubbornStreamer()
	session = ChatSession(streamer)
	handle = session.submit("hello")
	await settle()
	streamer.feeds[0].put_nowait("early")
	await settle()

	session.cancel()
	await handle.wait()
	await settle()

	assert assistant(session).content == "early"
	assert session.last_outcome == SessionStatus.CANCELLED


@pytest.mark.asyncio
async def test_failure_replaces_partial_reply_with_notice():
	streamer = ScriptedStreamer(["Part", "ial", StreamTransportError(detail="connection reset")], ["Recovered"])
	session = ChatSession(streamer)
	events: List[Dict[str, Any]] = []
	session.subscribe(events.append)

	handle = session.submit("question")
	await handle.wait()

	assert [message.content for message in session.messages] == ["question", FAILURE_NOTICE]
	assert all(message.id != handle.message_id for message in session.messages)
	assert session.last_outcome == SessionStatus.FAILED
	assert session.status == SessionStatus.IDLE
	assert {"type": "message.removed", "message_id": handle.message_id} in events

	retry = session.submit("again")
	await retry.wait()
	assert assistant(session).content == "Recovered"
	assert streamer.calls[1]["history"] == [
		{"role": "user", "content": "question"},
		{"role": "assistant", "content": FAILURE_NOTICE},
	]


@pytest.mark.asyncio
async def test_history_excludes_current_turn_and_respects_limit():
	streamer = ScriptedStreamer(["a1"], ["a2"], ["a3"])
	session = ChatSession(streamer, history_limit=2)

	for text in ("u1", "u2", "u3"):
		handle = session.submit(text)
		await handle.wait()

	assert streamer.calls[0] == {"text": "u1", "history": []}
	assert streamer.calls[1]["history"] == [
		{"role": "user", "content": "u1"},
		{"role": "assistant", "content": "a1"},
	]
	assert streamer.calls[2]["history"] == [
		{"role": "user", "content": "u2"},
		{"role": "assistant", "content": "a2"},
	]


@pytest.mark.asyncio
async def test_edit_truncates_later_turns_and_regenerates():
	streamer = ScriptedStreamer(["fresh answer"])
	session = ChatSession(streamer)
	u1, a1, u2, a2, u3 = (
		ChatMessage(role="user", content="u1"),
		ChatMessage(role="assistant", content="a1"),
		ChatMessage(role="user", content="u2", created_at=0.0),
		ChatMessage(role="assistant", content="a2"),
		ChatMessage(role="user", content="u3"),
	)
	session.messages = [u1, a1, u2, a2, u3]

	handle = session.edit_message(u2.id, "  u2 edited ")
	await handle.wait()

	assert [message.content for message in session.messages] == ["u1", "a1", "u2 edited", "fresh answer"]
	assert session.messages[2] is u2
	assert u2.created_at > 0.0
	assert streamer.calls == [
		{
			"text": "u2 edited",
			"history": [{"role": "user", "content": "u1"}, {"role": "assistant", "content": "a1"}],
		}
	]


@pytest.mark.asyncio
async def test_edit_rejects_bad_targets():
	session = ChatSession(ScriptedStreamer())
	user = ChatMessage(role="user", content="hello")
	reply = ChatMessage(role="assistant", content="hi")
	session.messages = [user, reply]

	with pytest.raises(KeyError):
		session.edit_message("missing", "text")
	with pytest.raises(ValueError):
		session.edit_message(reply.id, "text")
	with pytest.raises(ValueError):
		session.edit_message(user.id, "   ")
	assert session.messages == [user, reply]


@pytest.mark.asyncio
async def test_reset_cancels_and_clears_everything():
	streamer = FeedStreamer()
	session = ChatSession(streamer)
	events: List[Dict[str, Any]] = []
	session.subscribe(events.append)
	session.append_dictation("half a thought")
	handle = session.submit("hello")
	await settle()

	session.reset()
	await handle.wait()

	assert session.messages == []
	assert session.draft == ""
	assert session.in_flight is False
	assert handle.alive is False
	assert events[-1] == {"type": "transcript.reset", "messages": []}


def test_dictation_appends_to_draft():
	session = ChatSession(ScriptedStreamer())
	assert session.append_dictation(" I have a ") == "I have a "
	assert session.append_dictation("") == "I have a "
	assert session.append_dictation("headache") == "I have a headache "
	assert session.take_draft() == "I have a headache "
	assert session.draft == ""


def test_unsubscribe_stops_events():
	session = ChatSession(ScriptedStreamer())
	events: List[Dict[str, Any]] = []
	unsubscribe = session.subscribe(events.append)
	unsubscribe()
	unsubscribe()
	session.reset()
	assert events == []


@pytest.mark.asyncio
async def test_late_chunk_from_cancelled_request_never_reaches_the_next_reply():
	streamer = LingeringStreamer()
	session = ChatSession(streamer)
	first = session.submit("first question")
	await settle()
	streamer.feeds[0].put_nowait("first partial")
	await settle()
	session.cancel()

	second = session.submit("second question")
	await settle()
	assert len(streamer.feeds) == 2
	streamer.feeds[1].put_nowait("second ")
	await settle()
	streamer.feeds[0].put_nowait("late chunk")
	await first.wait()
	streamer.feeds[1].put_nowait("answer")
	streamer.feeds[1].put_nowait(_END)
	await second.wait()

	replies = [message.content for message in session.messages if message.role == "assistant"]
	assert replies == ["first partial", "second answer"]
	assert session.last_outcome == SessionStatus.COMPLETED
