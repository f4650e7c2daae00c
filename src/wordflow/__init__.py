"""wordflow: vocabulary notebook with FSRS-scheduled reviews."""

from wordflow.consts import VERSION

__version__ = VERSION
