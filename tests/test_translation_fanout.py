"""
Tests for the concurrent translation fan-out.

Covers:
- Per-language isolation (one failing language does not affect others)
- Total failure raising AggregateTranslationError
- Language validation before any job starts
- Output handler failures isolated to their job
- Independent output documents per job
- Job state transitions (pending, running, succeeded or failed)
"""

import sys
import os
import threading
import pytest
from unittest.mock import MagicMock

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.document import Node
from models.outcome import Failure, JobState, Success, TranslationJob
from services.exceptions import (
    AggregateTranslationError,
    TranslationError,
    UnsupportedLanguageError,
)
from services.translation_fanout import _run_job, run
from tests.fakes import FakeTranslationService


@pytest.fixture
def document():
    return Node.from_dict({"message": "Hello", "nested": {"greeting": "Good morning"}})


@pytest.fixture
def german_dictionary():
    return {"DE": {"Hello": "Hallo", "Good morning": "Guten Morgen"}}


def test_partial_success_scenario(document, german_dictionary):
    """EN -> [DE, FR] with FR failing returns DE's document and FR's failure"""
    service = FakeTranslationService(dictionaries=german_dictionary, failing={"FR"})

    results = run(document, "EN", ["DE", "FR"], service)

    assert set(results) == {"DE", "FR"}
    assert isinstance(results["DE"], Success)
    assert results["DE"].document.to_dict() == {
        "message": "Hallo",
        "nested": {"greeting": "Guten Morgen"}
    }
    assert isinstance(results["FR"], Failure)
    assert isinstance(results["FR"].error, TranslationError)


def test_fan_out_isolation(document):
    """Only FR fails; DE and ES succeed and the call does not raise"""
    service = FakeTranslationService(failing={"FR"})

    results = run(document, "EN", ["DE", "FR", "ES"], service)

    assert results["DE"].succeeded
    assert results["ES"].succeeded
    assert not results["FR"].succeeded
    assert results["ES"].document.to_dict()["message"] == "[ES] Hello"
    # Results keep the requested order
    assert list(results) == ["DE", "FR", "ES"]


def test_total_failure_raises_aggregate_error(document):
    service = FakeTranslationService(failing={"DE", "FR"})
    written = []

    with pytest.raises(AggregateTranslationError) as exc_info:
        run(document, "EN", ["DE", "FR"], service, output_handler=lambda lang, doc: written.append(lang))

    assert exc_info.value.failure_count == 2
    assert set(exc_info.value.failures) == {"DE", "FR"}
    assert written == []


def test_failing_sibling_does_not_cancel_others(document):
    """Every job runs to completion even after an early failure"""
    service = FakeTranslationService(failing={"DE"})

    results = run(document, "EN", ["DE", "FR", "ES", "EN-GB"], service, max_workers=1)

    assert [lang for lang, outcome in results.items() if outcome.succeeded] == ["FR", "ES", "EN-GB"]
    translated_targets = {target for _, _, target in service.calls}
    assert translated_targets == {"DE", "FR", "ES", "EN-GB"}


def test_unsupported_source_language_starts_no_jobs(document):
    service = FakeTranslationService()

    with pytest.raises(UnsupportedLanguageError) as exc_info:
        run(document, "XX", ["DE"], service)

    assert exc_info.value.role == "source"
    assert service.calls == []


def test_unsupported_target_language_starts_no_jobs(document):
    service = FakeTranslationService()

    with pytest.raises(UnsupportedLanguageError) as exc_info:
        run(document, "EN", ["DE", "KLINGON"], service)

    assert exc_info.value.language == "KLINGON"
    assert service.calls == []


def test_no_targets_returns_empty_mapping(document):
    service = FakeTranslationService()

    assert run(document, "EN", [], service) == {}
    assert service.calls == []


def test_duplicate_targets_translate_once(document):
    service = FakeTranslationService()

    results = run(document, "EN", ["DE", "DE"], service)

    assert list(results) == ["DE"]
    assert len(service.calls) == 2  # two leaves, one job


def test_jobs_build_independent_documents(document):
    service = FakeTranslationService()

    results = run(document, "EN", ["DE", "FR"], service)

    de_doc = results["DE"].document
    fr_doc = results["FR"].document
    assert de_doc is not fr_doc
    assert de_doc["nested"] is not fr_doc["nested"]
    assert document.to_dict() == {"message": "Hello", "nested": {"greeting": "Good morning"}}


def test_output_handler_failure_is_isolated(document):
    """A handler error (e.g. disk write) fails only its own language"""
    def handler(language, translated):
        if language == "FR":
            raise OSError("disk full")

    service = FakeTranslationService()
    results = run(document, "EN", ["DE", "FR"], service, output_handler=handler)

    assert results["DE"].succeeded
    assert isinstance(results["FR"].error, OSError)


def test_output_handler_receives_each_document(document):
    handler = MagicMock()
    service = FakeTranslationService()

    results = run(document, "EN", ["DE", "ES"], service, output_handler=handler)

    handled = {call.args[0]: call.args[1] for call in handler.call_args_list}
    assert set(handled) == {"DE", "ES"}
    assert handled["DE"] is results["DE"].document


def test_jobs_run_concurrently(document):
    """With enough workers all jobs are in flight at the same time"""
    barrier = threading.Barrier(3, timeout=5)

    class BarrierService(FakeTranslationService):
        def translate(self, text, source_language, target_language):
            if text == "Hello":
                barrier.wait()
            return super().translate(text, source_language, target_language)

    results = run(document, "EN", ["DE", "FR", "ES"], BarrierService(), max_workers=3)

    assert all(outcome.succeeded for outcome in results.values())


def test_unexpected_exception_is_recorded_as_failure(document):
    service = FakeTranslationService()
    service.translate = MagicMock(side_effect=RuntimeError("unexpected"))
    service.get_supported_source_languages = MagicMock(return_value=frozenset({"EN"}))
    service.get_supported_target_languages = MagicMock(return_value=frozenset({"DE"}))

    with pytest.raises(AggregateTranslationError) as exc_info:
        run(document, "EN", ["DE"], service)

    assert isinstance(exc_info.value.failures["DE"], RuntimeError)


def test_invalid_worker_count(document):
    with pytest.raises(ValueError):
        run(document, "EN", ["DE"], FakeTranslationService(), max_workers=0)


def test_job_state_after_success(document, german_dictionary):
    service = FakeTranslationService(dictionaries=german_dictionary)
    job = TranslationJob(document, "EN", "DE")
    seen = []
    original_translate = service.translate

    def translate(text, source_language, target_language):
        seen.append(job.state)
        return original_translate(text, source_language, target_language)

    service.translate = translate
    assert job.state is JobState.PENDING

    outcome = _run_job(job, service, preserve_opaque=True, max_depth=64, output_handler=None)

    assert outcome.succeeded
    assert job.state is JobState.SUCCEEDED
    assert seen and set(seen) == {JobState.RUNNING}


def test_job_state_after_failure(document):
    service = FakeTranslationService(failing={"FR"})
    job = TranslationJob(document, "EN", "FR")

    outcome = _run_job(job, service, preserve_opaque=True, max_depth=64, output_handler=None)

    assert not outcome.succeeded
    assert isinstance(outcome.error, TranslationError)
    assert job.state is JobState.FAILED


def test_job_state_failed_when_output_handler_raises(document, german_dictionary):
    service = FakeTranslationService(dictionaries=german_dictionary)
    job = TranslationJob(document, "EN", "DE")
    handler = MagicMock(side_effect=OSError("disk full"))

    outcome = _run_job(job, service, preserve_opaque=True, max_depth=64, output_handler=handler)

    assert isinstance(outcome, Failure)
    assert job.state is JobState.FAILED
