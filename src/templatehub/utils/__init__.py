"""Utilities for templatehub."""

from templatehub.utils.result import Err, Ok, Result
from templatehub.utils.subprocess_executor import SubprocessExecutor

__all__ = ["Err", "Ok", "Result", "SubprocessExecutor"]
