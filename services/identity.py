# User value: gives every translation its own storage names so concurrent users never collide.
import os
import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class ArtifactNames:
    source: str
    destination: str


# User value: mints the job id that ties staged blobs and logs to one translation.
def new_job_identity() -> str:
    return uuid.uuid4().hex


# User value: derives blob names for the uploaded document and its translation.
def derive_artifact_names(job_id: str, file_path: str) -> ArtifactNames:
    filename = os.path.basename(file_path)
    return ArtifactNames(
        source=f"{job_id}-{filename}",
        destination=f"{job_id}-translated-{filename}",
    )
