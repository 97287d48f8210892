"""
Sentence preprocessing shared by all scorers.

Every hypothesis and reference goes through the same pipeline before a
metric sees it:

    raw text -> external filter (optional) -> factor selection -> tokens

Factored tokens pack several annotation layers into one token, e.g.
``house|NN|house`` for surface form, part of speech and lemma.
"""

from __future__ import annotations

import subprocess

# Separates the sub-fields of a factored token.
FACTOR_DELIMITER = "|"

# Separates the indices of a factor specification such as "0|2".
FACTOR_SPEC_DELIMITER = "|"

# Text encoding used on the filter's stdin and stdout.
FILTER_ENCODING = "utf-8"


class FilterError(OSError):
    """The external filter command failed or produced unreadable output."""

    def __init__(
        self,
        command: str,
        returncode: int | None = None,
        stderr: str = "",
        reason: str = "",
    ):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        if returncode is not None:
            message = f"Filter command {command!r} exited with status {returncode}"
        else:
            message = f"Filter command {command!r} failed"
        if reason:
            message = f"{message}: {reason}"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


def split_tokens(line: str) -> list[str]:
    """Split on whitespace; runs of whitespace count as one separator."""
    return line.split()


def parse_factors(spec: str, delimiter: str = FACTOR_SPEC_DELIMITER) -> list[int]:
    """
    Parse a factor specification into an ordered list of factor indices.

    Args:
        spec: Delimiter-separated non-negative integers, e.g. ``"0|2"``.
        delimiter: Separator between indices.

    Returns:
        Factor indices in the order given. An empty spec yields ``[]``.
    """
    factors = []
    for item in spec.split(delimiter):
        item = item.strip()
        if not item:
            continue
        try:
            index = int(item)
        except ValueError:
            raise ValueError(f"Invalid factor index {item!r} in {spec!r}") from None
        if index < 0:
            raise ValueError(f"Factor index must be non-negative, got {index} in {spec!r}")
        factors.append(index)
    return factors


def apply_factors(sentence: str, factors: list[int], delimiter: str = FACTOR_DELIMITER) -> str:
    """
    Keep only the selected factors of every token in ``sentence``.

    Args:
        sentence: Whitespace-separated factored tokens.
        factors: Factor indices to keep, in output order.
        delimiter: Separator between the sub-fields of a token.

    Returns:
        The reduced sentence, tokens joined by single spaces. The sentence
        is returned unchanged when ``factors`` is empty.
    """
    if not factors:
        return sentence

    reduced = []
    for token in split_tokens(sentence):
        fields = token.split(delimiter)
        selected = []
        for factor in factors:
            if factor >= len(fields):
                raise IndexError(
                    f"Factor index {factor} out of range for token {token!r} "
                    f"with {len(fields)} factor(s)"
                )
            selected.append(fields[factor])
        reduced.append(delimiter.join(selected))
    return " ".join(reduced)


class PreProcessFilter:
    """
    Pipe sentences through an external shell command.

    Each call spawns the command, writes one sentence to its stdin, reads
    the filtered sentence from its stdout and reaps the process. The call
    blocks until the command exits; no timeout is applied.

    Args:
        command: Shell command line, e.g. ``"sed s/foo/bar/"``.
    """

    def __init__(self, command: str):
        if not command.strip():
            raise ValueError("Filter command must not be empty.")
        self.command = command

    def __call__(self, sentence: str) -> str:
        try:
            payload = (sentence + "\n").encode(FILTER_ENCODING)
        except UnicodeEncodeError as e:
            raise FilterError(self.command, reason=f"cannot encode input: {e}") from e

        # subprocess.run waits for and reaps the child on every exit path,
        # including when communicate() raises.
        result = subprocess.run(
            self.command,
            shell=True,
            input=payload,
            capture_output=True,
            check=False,
        )
        stderr = result.stderr.decode(FILTER_ENCODING, errors="replace")
        if result.returncode != 0:
            raise FilterError(self.command, result.returncode, stderr)
        try:
            output = result.stdout.decode(FILTER_ENCODING)
        except UnicodeDecodeError as e:
            raise FilterError(self.command, reason=f"cannot decode output: {e}") from e
        if output.endswith("\n"):
            output = output[:-1]
        return output

    def __repr__(self) -> str:
        return f"PreProcessFilter({self.command!r})"
