"""
Copy of source samples into the card.

What happens when the destination already exists and replacing was not
requested depends on the ExistingSamplePolicy chosen for the whole run:
- SKIP: keep the existing file and report it
- ERROR: fail with SampleAlreadyExistsError
"""

import logging
import shutil
from enum import Enum
from pathlib import Path

from kitgen.errors import ConfigError, SampleAlreadyExistsError, SampleCopyError


class ExistingSamplePolicy(Enum):
    """Behavior for an already present sample when --force is not set."""

    SKIP = 'skip'
    ERROR = 'error'

    @classmethod
    def parse(cls, value) -> 'ExistingSamplePolicy':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ', '.join(policy.value for policy in cls)
            raise ConfigError(f"Invalid existing sample policy: '{value}'",
                              f"expected one of {choices}") from None


class CopyOutcome(Enum):
    COPIED = 'copied'
    REPLACED = 'replaced'
    ALREADY_EXISTS = 'already_exists'


def copy_sample_if_needed(source: Path, destination: Path, replace_existing: bool,
                          policy: ExistingSamplePolicy = ExistingSamplePolicy.SKIP) -> CopyOutcome:
    """
    Copy a sample to its card destination.

    Args:
        source: Source sample file
        destination: Destination file path inside the card
        replace_existing: Overwrite an existing destination file
        policy: What to do with an existing file when not replacing

    Returns:
        What was done

    Raises:
        SampleAlreadyExistsError: Destination exists, not replacing, ERROR policy
        SampleCopyError: If creating folders or copying fails
    """
    source = Path(source)
    destination = Path(destination)

    if destination.exists() and not replace_existing:
        if policy is ExistingSamplePolicy.ERROR:
            raise SampleAlreadyExistsError(destination)
        logging.info(f"Sample '{destination}' already exists.")
        return CopyOutcome.ALREADY_EXISTS

    if destination.exists():
        outcome = CopyOutcome.REPLACED
        logging.info(f"Replacing existing sample '{destination}'")
    else:
        outcome = CopyOutcome.COPIED
        logging.info(f"Copying sample as '{destination}'")

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)
    except OSError as e:
        raise SampleCopyError(f"Failed to copy '{source}' to '{destination}'", e) from e

    return outcome
