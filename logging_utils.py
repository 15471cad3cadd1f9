#!/usr/bin/env python3
"""Logging utilities for ghec-backup."""

import os
import sys

import colorama

from security import SecurityValidator

colorama.init(autoreset=True)

PROGRESS_LINE_WIDTH = 35


class Logger:
    """Formatted console output with colors and credential redaction."""

    PROCESS_NAME = "ghec-backup"

    @classmethod
    def debug(cls, *messages: str) -> None:
        cls._write_stdout(colorama.Fore.LIGHTBLACK_EX, *cls._sanitize(messages))

    @classmethod
    def info(cls, *messages: str) -> None:
        cls._write_stdout(colorama.Fore.CYAN, *cls._sanitize(messages))

    @classmethod
    def warn(cls, *messages: str) -> None:
        cls._write_stdout(colorama.Fore.YELLOW, *cls._sanitize(messages))

    @classmethod
    def error(cls, *messages: str) -> None:
        cls._write_stderr(colorama.Fore.RED, *cls._sanitize(messages))

    @classmethod
    def progress(cls, text: str) -> None:
        """Write raw text to stdout without a line break."""
        sys.stdout.write(text)
        sys.stdout.flush()

    @classmethod
    def progress_line(cls, text: str) -> None:
        """Overwrite the current stdout line with text."""
        sys.stdout.write("\r" + " " * PROGRESS_LINE_WIDTH)
        sys.stdout.write("\r" + text)
        sys.stdout.flush()

    @staticmethod
    def _sanitize(messages) -> list:
        return [SecurityValidator.sanitize_for_logging(str(msg)) for msg in messages]

    @classmethod
    def _write_stdout(cls, color: str, *messages: str) -> None:
        sys.stdout.write(cls._format_line(color, *messages) + "\n")

    @classmethod
    def _write_stderr(cls, color: str, *messages: str) -> None:
        sys.stderr.write(cls._format_line(color, *messages) + "\n")

    @classmethod
    def _get_header(cls) -> str:
        return f"[{cls.PROCESS_NAME}:{os.getpid()}]"

    @classmethod
    def _format_line(cls, color: str, *messages: str) -> str:
        header = cls._get_header()
        message = " ".join(str(m) for m in messages)
        return f"{color}{header}{colorama.Style.RESET_ALL} {message}"
