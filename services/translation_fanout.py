"""
Translation Fan-Out Service

Runs one translation job per target language on a bounded thread pool:
1. Validate source and target languages before any work starts
2. Submit one independent job per target language
3. Catch every job failure at the job boundary and record it as a Failure
4. Wait for all jobs to finish (no sibling cancellation)
5. Fail as a whole only if no language succeeded
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, Optional

from models.document import Node
from models.outcome import Failure, JobState, Success, TranslationJob, TranslationOutcome
from services.document_tree import DEFAULT_MAX_DEPTH
from services.exceptions import AggregateTranslationError
from services.leaf_transformer import transform
from services.translation_service import TranslationService, validate_languages

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4

# Called inside the job with (target_language, translated_document)
OutputHandler = Callable[[str, Node], None]


def run(
    document: Node,
    source_language: str,
    target_languages: Iterable[str],
    service: TranslationService,
    max_workers: int = DEFAULT_MAX_WORKERS,
    preserve_opaque: bool = True,
    max_depth: int = DEFAULT_MAX_DEPTH,
    output_handler: Optional[OutputHandler] = None
) -> Dict[str, TranslationOutcome]:
    """
    Translate a document into every target language concurrently.

    Args:
        document: Source document, shared read-only by all jobs
        source_language: Language code of the document's strings
        target_languages: Language codes to translate into (duplicates ignored)
        service: Translation provider used by every job
        max_workers: Upper bound on concurrently running jobs
        preserve_opaque: Keep non-string leaves in the output documents
        max_depth: Nesting limit for walking/building documents
        output_handler: Optional callback run inside each job after its
            document is built (e.g. writing the file). A failing handler
            fails that job only.

    Returns:
        Mapping of target language to Success(document) or Failure(error),
        ordered like the requested targets

    Raises:
        UnsupportedLanguageError: Before any job starts, if a language is unsupported
        AggregateTranslationError: If at least one target was requested and all failed
    """
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1")

    targets = list(dict.fromkeys(target_languages))
    validate_languages(service, source_language, targets)

    if not targets:
        logger.info("No target languages requested, nothing to translate")
        return {}

    jobs = [TranslationJob(document, source_language, target) for target in targets]
    workers = min(max_workers, len(jobs))

    logger.info(
        f"Translating document from {source_language} to {targets} "
        f"using {service.get_service_name()} with {workers} workers"
    )

    outcomes: Dict[str, TranslationOutcome] = {}
    completed = 0
    failed = 0

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="translation-job") as executor:
        futures = {
            executor.submit(_run_job, job, service, preserve_opaque, max_depth, output_handler): job
            for job in jobs
        }

        # Futures are drained by this thread only; counters are local to it
        for future in as_completed(futures):
            job = futures[future]
            outcome = future.result()
            outcomes[job.target_language] = outcome

            if outcome.succeeded:
                completed += 1
                logger.info(
                    f"Successfully translated to {job.target_language}: "
                    f"{completed} of {len(jobs)} languages completed"
                )
            else:
                failed += 1
                logger.error(
                    f"Failed to translate to {job.target_language} "
                    f"({failed} of {len(jobs)} failed): {outcome.error}"
                )

    results = {target: outcomes[target] for target in targets}

    logger.info(
        f"Translation completed: {completed} successes, {failed} failures "
        f"out of {len(jobs)} total languages"
    )

    if completed == 0:
        raise AggregateTranslationError(
            {language: outcome.error for language, outcome in results.items()}
        )
    if failed > 0:
        logger.warning(f"Some translations failed, but {completed} languages were translated successfully")

    return results


def _run_job(
    job: TranslationJob,
    service: TranslationService,
    preserve_opaque: bool,
    max_depth: int,
    output_handler: Optional[OutputHandler]
) -> TranslationOutcome:
    """Execute one job to a terminal outcome. Never raises."""
    job.state = JobState.RUNNING
    logger.debug(f"Job {job.source_language}->{job.target_language} running")

    def translate_leaf(text: str) -> str:
        return service.translate(text, job.source_language, job.target_language)

    try:
        translated = transform(
            job.document,
            translate_leaf,
            preserve_opaque=preserve_opaque,
            max_depth=max_depth
        )
        if output_handler is not None:
            output_handler(job.target_language, translated)
    except Exception as e:
        job.state = JobState.FAILED
        logger.debug(f"Job {job.source_language}->{job.target_language} failed", exc_info=True)
        return Failure(e)

    job.state = JobState.SUCCEEDED
    return Success(translated)
