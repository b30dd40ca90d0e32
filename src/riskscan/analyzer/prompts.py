"""Prompt templates for the remote analyzer."""

from __future__ import annotations

SYSTEM_PROMPT = "You are a security expert."

RESPONSE_FORMAT = """\
Respond ONLY with a JSON object of the form:
{"findings": [{"vulnerability": string, "risk_score": "low"|"medium"|"high", \
"filename": string, "lines_affected": [int, ...], "explanation": string, \
"recommendation": string, "reference": string (optional URL)}]}
If nothing is found, respond with {"findings": []}."""


def code_prompt(content: str, path: str) -> str:
    return (
        "Analyze the following code for security issues, including but not "
        "limited to SQL injection, hardcoded secrets, and improper input "
        "validation. For each issue, give the type, a brief description, and "
        "the affected line numbers.\n"
        f"{RESPONSE_FORMAT}\n\n"
        f"File: {path}\n\n{content}"
    )


def dependencies_prompt(specifiers: list[str]) -> str:
    joined = "\n".join(specifiers)
    return (
        "Analyze the following list of dependencies for known "
        "vulnerabilities. List any vulnerabilities found and give "
        "recommendations. Use the manifest name as the filename.\n"
        f"{RESPONSE_FORMAT}\n\n{joined}"
    )
