from __future__ import annotations

import pytest

from _openai_fakes import fake_client, medical_image_response, medicine_response, text_response, validation_response
from services.analysis_pipeline import AnalysisPipeline
from services.openai.analysis_invoker import AnalysisInvoker
from services.openai.analysis_schema import MEDICAL_IMAGE_FUNCTION_NAME, MEDICINE_FUNCTION_NAME
from services.openai.validation_profiles import MEDICAL_IMAGE, VALIDATION_FUNCTION_NAME
from services.openai.validity_gate import ValidityGate
from utils.errors import ValidationRejected


def pipeline_for(client) -> AnalysisPipeline:
    return AnalysisPipeline(ValidityGate(client), AnalysisInvoker(client))


@pytest.mark.asyncio
async def test_valid_image_is_analyzed(png_b64):
    client = fake_client(
        {
            VALIDATION_FUNCTION_NAME: validation_response(True),
            MEDICAL_IMAGE_FUNCTION_NAME: medical_image_response(),
        }
    )

    record = await pipeline_for(client).analyze_medical_image(png_b64, "image/png", "  ")

    assert record.body_part == "Chest"
    assert len(client.responses.calls_for(VALIDATION_FUNCTION_NAME)) == 1
    assert len(client.responses.calls_for(MEDICAL_IMAGE_FUNCTION_NAME)) == 1


@pytest.mark.asyncio
async def test_rejected_image_never_reaches_the_analyzer(png_b64):
    client = fake_client(
        {
            VALIDATION_FUNCTION_NAME: validation_response(False, "This looks like a landscape photo."),
            MEDICAL_IMAGE_FUNCTION_NAME: medical_image_response(),
        }
    )

    with pytest.raises(ValidationRejected) as excinfo:
        await pipeline_for(client).analyze_medical_image(png_b64, "image/png")

    assert excinfo.value.accepted_categories == list(MEDICAL_IMAGE.accepted_categories)
    assert client.responses.calls_for(MEDICAL_IMAGE_FUNCTION_NAME) == []


@pytest.mark.asyncio
async def test_checkpoint_runs_even_after_a_passing_precheck(png_b64):
    client = fake_client(
        {
            VALIDATION_FUNCTION_NAME: [validation_response(True), validation_response(False, "Not a medicine.")],
            MEDICINE_FUNCTION_NAME: medicine_response(),
        }
    )
    pipeline = pipeline_for(client)

    precheck = await pipeline.precheck_medicine(png_b64, "image/png")
    assert precheck.is_valid is True

    with pytest.raises(ValidationRejected):
        await pipeline.analyze_medicine(png_b64, "image/png")
    assert len(client.responses.calls_for(VALIDATION_FUNCTION_NAME)) == 2
    assert client.responses.calls_for(MEDICINE_FUNCTION_NAME) == []


@pytest.mark.asyncio
async def test_checkpoint_outage_blocks_analysis(png_b64):
    client = fake_client(
        {
            VALIDATION_FUNCTION_NAME: ConnectionError("down"),
            MEDICAL_IMAGE_FUNCTION_NAME: medical_image_response(),
        }
    )
    pipeline = pipeline_for(client)

    assert (await pipeline.precheck_medical_image(png_b64, "image/png")).is_valid is True
    with pytest.raises(ValidationRejected):
        await pipeline.analyze_medical_image(png_b64, "image/png")
    assert client.responses.calls_for(MEDICAL_IMAGE_FUNCTION_NAME) == []


@pytest.mark.asyncio
async def test_term_is_trimmed_validated_and_explained():
    client = fake_client({VALIDATION_FUNCTION_NAME: validation_response(True), None: text_response("Plain words.")})

    explanation = await pipeline_for(client).explain_term("  tachycardia ")

    assert explanation.content == "Plain words."
    validation_text = " ".join(
        part["text"]
        for message in client.responses.calls_for(VALIDATION_FUNCTION_NAME)[0]["input"]
        for part in message["content"]
    )
    assert '"tachycardia"' in validation_text


@pytest.mark.asyncio
async def test_blank_term_makes_no_call():
    client = fake_client()
    with pytest.raises(ValueError):
        await pipeline_for(client).explain_term("   ")
    assert client.responses.calls == []


@pytest.mark.asyncio
async def test_non_medical_term_is_rejected():
    client = fake_client({VALIDATION_FUNCTION_NAME: validation_response(False, "hello is a greeting."), None: text_response("x")})

    with pytest.raises(ValidationRejected) as excinfo:
        await pipeline_for(client).explain_term("hello")
    assert "not recognized as a valid medical term" in excinfo.value.user_message
    assert client.responses.calls_for(None) == []
