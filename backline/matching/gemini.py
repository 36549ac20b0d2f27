# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Gemini-backed semantic matcher for saved tactics.

The matcher sends the command together with tactic summaries (never
coordinates) to the Gemini ``generateContent`` endpoint and expects a small
JSON object back::

    {"tacticId": "<id or null>", "needsMirror": true, "reason": "..."}

Transient failures (rate limits, server errors, timeouts, connection errors)
are retried with exponential backoff. Every other failure raises a
:class:`TacticMatchError`, which :class:`~backline.matching.matcher.TacticMatcher`
catches and answers with the keyword fallback.
"""
from __future__ import annotations

import asyncio
import json
import os
import re
from typing import Any, Dict, List, Optional

import httpx

from backline.engine.config import ENGINE_CONFIG, MatchingConfig
from backline.utils.debug import ResolutionDebugger

from .base import MatchVerdict, SemanticMatcher

SYSTEM_PROMPT = (
    "You match field hockey coaching commands to saved tactics. "
    "Pick the single saved tactic that best fits the command, or null if none fits. "
    "Set needsMirror to true when the command is for the other team than the one "
    "the tactic was saved for. Answer with JSON only: "
    '{"tacticId": string | null, "needsMirror": boolean, "reason": string}.'
)

_JSON_BLOCK = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class TacticMatchError(Exception):
    """Base error raised by the HTTP matcher.

    Parameters
    ----------
    message : str
        Human-readable description.
    """

    def __init__(self, message: str) -> None:
        """Create the error.

        Parameters
        ----------
        message : str
            Human-readable description.
        """
        super().__init__(message)


class TacticMatchRateLimitError(TacticMatchError):
    """Raised when the service keeps rate limiting after every retry.

    Parameters
    ----------
    message : str, default="Rate limited by Gemini API"
        Human-readable description.
    """

    def __init__(self, message: str = "Rate limited by Gemini API") -> None:
        """Create the error.

        Parameters
        ----------
        message : str, default="Rate limited by Gemini API"
            Human-readable description.
        """
        super().__init__(message)


class TacticMatchAPIError(TacticMatchError):
    """Raised for non-retryable responses or unusable payloads.

    Parameters
    ----------
    message : str
        Human-readable description.
    status_code : int
        HTTP status of the failing response.
    response_body : Optional[str]
        Raw response text.
    """

    def __init__(self, message: str, status_code: int, response_body: Optional[str] = None) -> None:
        """Create the error.

        Parameters
        ----------
        message : str
            Human-readable description.
        status_code : int
            HTTP status of the failing response.
        response_body : Optional[str]
            Raw response text, when available.
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


def extract_json_object(text: str) -> Dict[str, Any]:
    """Pull the first JSON object out of a model reply.

    Parameters
    ----------
    text : str
        Raw reply, possibly wrapped in a fenced code block.

    Returns
    -------
    Dict[str, Any]
        Decoded object.

    Raises
    ------
    TacticMatchAPIError
        If no JSON object can be decoded.
    """
    match = _JSON_BLOCK.search(text) or _JSON_OBJECT.search(text)
    if match is None:
        raise TacticMatchAPIError("No JSON object in model reply", 200, text)
    candidate = match.group(1) if match.re is _JSON_BLOCK else match.group(0)
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise TacticMatchAPIError(f"Malformed JSON in model reply: {exc}", 200, text) from exc
    if not isinstance(data, dict):
        raise TacticMatchAPIError("Model reply is not a JSON object", 200, text)
    return data


def verdict_from_payload(data: Dict[str, Any], known_ids: Optional[List[str]] = None) -> MatchVerdict:
    """Convert a decoded model reply into a verdict.

    Parameters
    ----------
    data : Dict[str, Any]
        Decoded reply with ``tacticId``, ``needsMirror`` and ``reason``.
    known_ids : Optional[List[str]]
        Identifiers that were offered; an id outside this list is treated as
        no answer.

    Returns
    -------
    MatchVerdict
        Collaborator verdict.
    """
    tactic_id = data.get("tacticId")
    if tactic_id is not None:
        tactic_id = str(tactic_id)
        if known_ids is not None and tactic_id not in known_ids:
            tactic_id = None
    needs_mirror = bool(data.get("needsMirror", False)) and tactic_id is not None
    return MatchVerdict(tactic_id, needs_mirror, str(data.get("reason", "")), "collaborator")


class GeminiTacticMatcher(SemanticMatcher):
    """Async HTTP matcher that asks Gemini to choose a saved tactic.

    Parameters
    ----------
    api_key : Optional[str]
        API key; defaults to the environment variable named in the config.
    config : Optional[MatchingConfig]
        Model, endpoint, timeout and retry settings.
    transport : Optional[httpx.AsyncBaseTransport]
        Custom transport, used by tests to stub the service.
    debugger : Optional[ResolutionDebugger]
        Receives retry and failure events.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[MatchingConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        debugger: Optional[ResolutionDebugger] = None,
    ) -> None:
        """Configure the matcher without opening a connection.

        Parameters
        ----------
        api_key : Optional[str]
            API key; defaults to the configured environment variable.
        config : Optional[MatchingConfig]
            Matching settings; defaults to ``ENGINE_CONFIG.matching``.
        transport : Optional[httpx.AsyncBaseTransport]
            Custom HTTP transport.
        debugger : Optional[ResolutionDebugger]
            Optional trace logger.

        Raises
        ------
        ValueError
            If no API key is supplied or found in the environment.
        """
        self.config = config or ENGINE_CONFIG.matching
        self.api_key = api_key or os.environ.get(self.config.api_key_env)
        if not self.api_key:
            raise ValueError(f"{self.config.api_key_env} environment variable not set")
        self.debugger = debugger
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Return the shared HTTP client, creating it on first use.

        Returns
        -------
        httpx.AsyncClient
            Client bound to the configured timeout.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GeminiTacticMatcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _build_url(self) -> str:
        """Build the ``generateContent`` URL for the configured model.

        Returns
        -------
        str
            Endpoint URL including the API key.
        """
        return f"{self.config.base_url}/models/{self.config.model}:generateContent?key={self.api_key}"

    def _build_request_body(self, command: str, summaries: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Build the JSON request body.

        Parameters
        ----------
        command : str
            Free-text request.
        summaries : List[Dict[str, Any]]
            Tactic summaries offered to the model.

        Returns
        -------
        Dict[str, Any]
            Request payload.
        """
        user = f"Command: {command}\nSaved tactics:\n{json.dumps(summaries, indent=2)}"
        return {
            "system_instruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "contents": [{"role": "user", "parts": [{"text": user}]}],
            "generationConfig": {"temperature": 0.0, "maxOutputTokens": 256},
        }

    def _log(self, event_type: str, description: str) -> None:
        """Forward an event to the debugger when one is attached.

        Parameters
        ----------
        event_type : str
            Event category.
        description : str
            Event details.
        """
        if self.debugger:
            self.debugger.log_event(event_type, description)

    async def _backoff(self, attempt: int, reason: str) -> None:
        """Sleep before the next retry.

        Parameters
        ----------
        attempt : int
            Zero-based attempt number.
        reason : str
            Why the attempt is being retried.
        """
        delay = self.config.retry_delay * (2 ** attempt)
        self._log("MATCH_RETRY", f"{reason}, retrying in {delay:.1f}s (attempt {attempt + 1})")
        await asyncio.sleep(delay)

    async def match(self, command: str, summaries: List[Dict[str, Any]]) -> MatchVerdict:
        """Ask Gemini which saved tactic fits ``command``.

        Parameters
        ----------
        command : str
            Free-text request.
        summaries : List[Dict[str, Any]]
            Tactic summaries without coordinates.

        Returns
        -------
        MatchVerdict
            Collaborator verdict.

        Raises
        ------
        TacticMatchRateLimitError
            If every attempt was rate limited.
        TacticMatchAPIError
            For client errors or unusable replies.
        TacticMatchError
            If every attempt failed on the network.
        """
        client = self._get_client()
        body = self._build_request_body(command, summaries)
        known_ids = [str(summary.get("id")) for summary in summaries]
        attempts = max(1, self.config.max_retries + 1)
        last_error: Optional[TacticMatchError] = None

        for attempt in range(attempts):
            try:
                response = await client.post(self._build_url(), json=body)
            except httpx.TimeoutException:
                last_error = TacticMatchError("Request timed out")
            except httpx.RequestError as exc:
                last_error = TacticMatchError(f"Request error: {exc}")
            else:
                if response.status_code == 200:
                    return verdict_from_payload(extract_json_object(self._parse_response(response)), known_ids)
                if response.status_code == 429:
                    last_error = TacticMatchRateLimitError()
                elif response.status_code >= 500:
                    last_error = TacticMatchAPIError(
                        f"Server error: {response.status_code}", response.status_code, response.text
                    )
                else:
                    raise TacticMatchAPIError(
                        f"API error: {response.status_code}", response.status_code, response.text
                    )
            if attempt + 1 < attempts:
                await self._backoff(attempt, str(last_error))

        self._log("MATCH_FAILED", str(last_error))
        raise last_error if last_error else TacticMatchError("Failed after all retries")

    def _parse_response(self, response: httpx.Response) -> str:
        """Extract the generated text from a successful response.

        Parameters
        ----------
        response : httpx.Response
            HTTP 200 response.

        Returns
        -------
        str
            Text of the first candidate.

        Raises
        ------
        TacticMatchAPIError
            If the payload has no candidate text.
        """
        try:
            data = response.json()
        except ValueError as exc:
            raise TacticMatchAPIError("Response is not JSON", response.status_code, response.text) from exc
        candidates = data.get("candidates", [])
        if not candidates:
            raise TacticMatchAPIError("No candidates in response", 200, response.text)
        parts = candidates[0].get("content", {}).get("parts", [])
        if not parts:
            raise TacticMatchAPIError("No parts in response", 200, response.text)
        return parts[0].get("text", "")
