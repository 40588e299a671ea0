# User value: makes sure uploaded documents never linger in storage after a translation run.
import logging
from typing import List, Tuple

from services.errors import CleanupError, ObjectNotFound
from services.identity import ArtifactNames

logger = logging.getLogger("translator.cleanup")


# User value: removes both staged blobs even when one delete fails, and reports every failure.
def cleanup_artifacts(store, names: ArtifactNames, *, strict: bool = False) -> None:
    """Delete the staged source and destination blobs.

    With ``strict`` off a blob that is already gone counts as deleted; the
    destination blob never exists when the batch was rejected or timed out.
    Every blob gets a delete attempt, even if an earlier delete is interrupted.
    """
    blob_names = (names.source, names.destination)
    failures: List[Tuple[str, Exception]] = []

    for index, blob_name in enumerate(blob_names):
        try:
            store.delete(blob_name)
        except ObjectNotFound as exc:
            if strict:
                failures.append((blob_name, exc))
            else:
                logger.info("staged_artifact_already_absent blob=%s", blob_name)
        except Exception as exc:
            failures.append((blob_name, exc))
        except BaseException:
            _delete_remaining(store, blob_names[index + 1:])
            raise

    if failures:
        for blob_name, exc in failures:
            logger.error("staged_artifact_delete_failed blob=%s error=%s: %s", blob_name, exc.__class__.__name__, exc)
        raise CleanupError(failures)


def _delete_remaining(store, blob_names) -> None:
    for blob_name in blob_names:
        try:
            store.delete(blob_name)
        except Exception as exc:
            logger.error("staged_artifact_delete_failed blob=%s error=%s: %s", blob_name, exc.__class__.__name__, exc)
