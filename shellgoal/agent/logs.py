"""Verbose console banners for goal runs."""

import logging

logger = logging.getLogger("shellgoal.run")


def indent_multiline(text: str) -> str:
    return "\n".join(f"  {line}" for line in text.split("\n"))


def log_header(message: str) -> None:
    rule = "═" * 80
    logger.info(f"\n{rule}\n═ {message}\n{rule}\n")


def log_sub_header(message: str) -> None:
    rule = "-" * 60
    logger.info(f"\n{rule}\n> {message}\n{rule}\n")


def log_command_start(command: str) -> None:
    logger.info(f"\n[EXECUTING COMMAND]\n$ {command}\n")


def log_command_result(stdout: str, stderr: str) -> None:
    if stdout.strip():
        logger.info("[STDOUT]:\n" + indent_multiline(stdout))
    else:
        logger.info("[STDOUT]: (empty)\n")

    if stderr.strip():
        logger.info("[TERMINAL]:\n" + indent_multiline(stderr))
    else:
        logger.info("[TERMINAL]: (empty)\n")
