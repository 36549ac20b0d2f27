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
"""Tests for matching commands to saved tactics."""

import asyncio
import json

import httpx
import pytest

from backline.engine.config import MatchingConfig
from backline.matching import (
    GeminiTacticMatcher,
    MatchVerdict,
    SemanticMatcher,
    TacticMatchAPIError,
    TacticMatchCache,
    TacticMatchRateLimitError,
    TacticMatcher,
    extract_metadata_from_tags,
    keyword_match,
)
from backline.matching.cache import normalize_command
from backline.matching.gemini import extract_json_object, verdict_from_payload
from backline.models.tactic import RelativePosition, SavedTactic, TacticMetadata
from backline.utils.debug import ResolutionDebugger


def make_tactic(tactic_id: str, name: str, tags=()) -> SavedTactic:
    """Create a one-player tactic whose metadata comes from its name and tags."""
    return SavedTactic(
        tactic_id,
        name,
        tuple(tags),
        "single_team",
        (RelativePosition("red", "Player", 0, 40.0, 50.0),),
        extract_metadata_from_tags(name, tags),
    )


def make_library():
    """Return a small library of saved tactics."""
    return [
        make_tactic("t1", "Red APC 1-3 injection", ("apc", "corner")),
        make_tactic("t2", "Blue DPC back 4", ("dpc", "defending")),
        make_tactic("t3", "Red outlet back 4", ("outlet",)),
    ]


def gemini_reply(text: str) -> httpx.Response:
    """Wrap model text in a ``generateContent`` response."""
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def make_gemini(handler, **overrides) -> GeminiTacticMatcher:
    """Create a Gemini matcher backed by a mock transport with no retry delay."""
    config = MatchingConfig(retry_delay=0.0, **overrides)
    return GeminiTacticMatcher(api_key="test-key", config=config, transport=httpx.MockTransport(handler))


class FakeCollaborator(SemanticMatcher):
    """Semantic matcher with a canned answer."""

    def __init__(self, verdict=None, error=None, delay=0.0):
        """Store the canned behaviour.

        Parameters
        ----------
        verdict : Optional[MatchVerdict]
            Verdict to return.
        error : Optional[Exception]
            Exception to raise instead.
        delay : float
            Seconds to sleep before answering.
        """
        self.verdict = verdict
        self.error = error
        self.delay = delay
        self.calls = 0

    async def match(self, command, summaries):
        """Return the canned verdict."""
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.verdict


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        """Start at zero."""
        self.now = 0.0

    def __call__(self):
        """Return the current time."""
        return self.now


class TestMetadataExtraction:
    """Tests for deriving hints from names and tags."""

    def test_defensive_corner(self) -> None:
        """Team, phase and structure are all recognised."""
        assert extract_metadata_from_tags("Blue DPC Back 4", []) == TacticMetadata(
            primary_team="blue", phase="defense", is_dpc=True, structure="back_4"
        )

    def test_tags_are_searched(self) -> None:
        """Tags contribute to the extracted hints."""
        assert extract_metadata_from_tags("Press", ["half court"]) == TacticMetadata(
            phase="defense", is_press=True, structure="half_court"
        )

    def test_defensive_corner_takes_priority(self) -> None:
        """A DPC flag wins over attacking words."""
        meta = extract_metadata_from_tags("Attacking DPC", [])
        assert meta.is_dpc and not meta.is_apc
        assert meta.phase == "defense"

    def test_nothing_recognised(self) -> None:
        """Names without hints produce no metadata."""
        assert extract_metadata_from_tags("Notes", []) is None

    def test_team_words_must_stand_alone(self) -> None:
        """Words that merely contain a team name do not set the team."""
        assert extract_metadata_from_tags("Tired outlet", ["ordered"]).primary_team is None
        assert extract_metadata_from_tags("Bluebell press", []).primary_team is None

    def test_team_initials(self) -> None:
        """Single-letter team tags are recognised."""
        assert extract_metadata_from_tags("Outlet", ["b"]).primary_team == "blue"
        assert extract_metadata_from_tags("R-outlet", []).primary_team == "red"


class TestKeywordMatch:
    """Tests for the local keyword fallback."""

    def test_phase_and_structure_pick_the_tactic(self) -> None:
        """An APC command ignores tactics tied to other phases."""
        verdict = keyword_match("show blue apc 1-3", make_library())
        assert verdict.tactic_id == "t1"
        assert verdict.source == "keyword"

    def test_other_team_needs_mirror(self) -> None:
        """Naming the other team than the tactic's requests a mirror."""
        assert keyword_match("show blue apc 1-3", make_library()).needs_mirror
        assert not keyword_match("red apc 1-3", make_library()).needs_mirror

    def test_outlet_command(self) -> None:
        """Outlet commands find outlet tactics."""
        verdict = keyword_match("red outlet back 4", make_library())
        assert verdict.tactic_id == "t3" and not verdict.needs_mirror

    def test_defending_command(self) -> None:
        """Defending commands find defensive corners."""
        assert keyword_match("defending corner back 4", make_library()).tactic_id == "t2"

    def test_no_match(self) -> None:
        """Unrelated commands match nothing."""
        verdict = keyword_match("fly to the moon", make_library())
        assert verdict.tactic_id is None and not verdict.needs_mirror

    def test_ties_keep_library_order(self) -> None:
        """Equal scores keep the earliest tactic."""
        tactics = [make_tactic("first", "Outlet drill"), make_tactic("second", "Outlet drill")]
        assert keyword_match("outlet", tactics).tactic_id == "first"

    def test_minimum_score(self) -> None:
        """Scores below the threshold are not reported."""
        assert keyword_match("red outlet back 4", make_library(), min_score=50).tactic_id is None


class TestTacticMatchCache:
    """Tests for the verdict memo."""

    def test_hit_is_marked_as_cached(self) -> None:
        """Stored verdicts come back with the cache source."""
        cache = TacticMatchCache(ttl=10, max_entries=4)
        cache.put("Show  APC", MatchVerdict("t1", True, "fits"))
        hit = cache.get("show apc")
        assert hit == MatchVerdict("t1", True, "fits", "cache")

    def test_entries_expire(self) -> None:
        """Entries older than the TTL are dropped."""
        clock = FakeClock()
        cache = TacticMatchCache(ttl=10, max_entries=4, clock=clock)
        cache.put("apc", MatchVerdict("t1"))
        clock.now = 9.9
        assert cache.get("apc") is not None
        clock.now = 10.0
        assert cache.get("apc") is None
        assert len(cache) == 0

    def test_least_recently_used_is_evicted(self) -> None:
        """The cache holds at most ``max_entries`` commands."""
        cache = TacticMatchCache(ttl=10, max_entries=2)
        cache.put("a", MatchVerdict("t1"))
        cache.put("b", MatchVerdict("t2"))
        cache.get("a")
        cache.put("c", MatchVerdict("t3"))
        assert cache.get("b") is None
        assert cache.get("a").tactic_id == "t1"
        assert cache.get("c").tactic_id == "t3"

    def test_invalidate(self) -> None:
        """Invalidation forgets everything."""
        cache = TacticMatchCache(ttl=10, max_entries=2)
        cache.put("a", MatchVerdict("t1"))
        cache.invalidate()
        assert len(cache) == 0

    def test_zero_capacity_stores_nothing(self) -> None:
        """A cache sized zero never stores verdicts."""
        cache = TacticMatchCache(ttl=10, max_entries=0)
        cache.put("a", MatchVerdict("t1"))
        assert cache.get("a") is None

    def test_normalize_command(self) -> None:
        """Keys ignore case and spacing."""
        assert normalize_command("  Show\tRed  APC ") == "show red apc"


class TestGeminiReplyParsing:
    """Tests for decoding model replies."""

    def test_fenced_json(self) -> None:
        """JSON inside a fenced block is extracted."""
        text = 'Sure:\n```json\n{"tacticId": "t1", "needsMirror": true}\n```'
        assert extract_json_object(text) == {"tacticId": "t1", "needsMirror": True}

    def test_bare_json(self) -> None:
        """A bare object is extracted from surrounding prose."""
        assert extract_json_object('Answer {"tacticId": null} done') == {"tacticId": None}

    def test_no_json(self) -> None:
        """Replies without JSON are rejected."""
        with pytest.raises(TacticMatchAPIError):
            extract_json_object("no idea")

    def test_unknown_id_is_dropped(self) -> None:
        """Identifiers that were not offered become no answer."""
        verdict = verdict_from_payload({"tacticId": "zzz", "needsMirror": True}, ["t1"])
        assert verdict.tactic_id is None and not verdict.needs_mirror


class TestGeminiTacticMatcher:
    """Tests for the HTTP collaborator against a mock transport."""

    def test_successful_match(self) -> None:
        """A 200 reply becomes a collaborator verdict."""
        seen = []

        def handler(request):
            seen.append(request)
            return gemini_reply('```json\n{"tacticId": "t2", "needsMirror": true, "reason": "dpc"}\n```')

        async def run():
            async with make_gemini(handler) as matcher:
                return await matcher.match("red dpc", [t.summary() for t in make_library()])

        verdict = asyncio.run(run())
        assert verdict == MatchVerdict("t2", True, "dpc", "collaborator")
        assert "key=test-key" in str(seen[0].url)
        body = json.loads(seen[0].content)
        prompt = body["contents"][0]["parts"][0]["text"]
        assert "Blue DPC back 4" in prompt
        assert "40.0" not in prompt

    def test_server_errors_are_retried(self) -> None:
        """A transient 503 is retried before succeeding."""
        statuses = [503, 200]

        def handler(request):
            status = statuses.pop(0)
            if status != 200:
                return httpx.Response(status, text="busy")
            return gemini_reply('{"tacticId": "t1"}')

        async def run():
            async with make_gemini(handler) as matcher:
                return await matcher.match("apc", [t.summary() for t in make_library()])

        assert asyncio.run(run()).tactic_id == "t1"
        assert statuses == []

    def test_rate_limit_exhausts_retries(self) -> None:
        """Persistent rate limiting raises after every attempt."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(429)

        async def run():
            async with make_gemini(handler, max_retries=2) as matcher:
                await matcher.match("apc", [])

        with pytest.raises(TacticMatchRateLimitError):
            asyncio.run(run())
        assert len(calls) == 3

    def test_client_errors_are_not_retried(self) -> None:
        """A 400 reply raises immediately."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400, text="bad request")

        async def run():
            async with make_gemini(handler) as matcher:
                await matcher.match("apc", [])

        with pytest.raises(TacticMatchAPIError) as info:
            asyncio.run(run())
        assert info.value.status_code == 400
        assert len(calls) == 1

    def test_missing_api_key(self, monkeypatch) -> None:
        """Without a key the matcher cannot be created."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            GeminiTacticMatcher()


class TestTacticMatcher:
    """Tests for the cache, collaborator and keyword chain."""

    def test_collaborator_answer_is_cached(self) -> None:
        """A second identical command is served from the cache."""
        collaborator = FakeCollaborator(MatchVerdict("t2", True, "fits"))
        matcher = TacticMatcher(semantic=collaborator)
        first = asyncio.run(matcher.match("Red DPC", make_library()))
        second = asyncio.run(matcher.match("red  dpc", make_library()))
        assert first.source == "collaborator"
        assert second == MatchVerdict("t2", True, "fits", "cache")
        assert collaborator.calls == 1

    def test_collaborator_error_falls_back(self, tmp_path) -> None:
        """A failing collaborator is answered by the keyword scorer."""
        debugger = ResolutionDebugger(str(tmp_path))
        try:
            matcher = TacticMatcher(semantic=FakeCollaborator(error=RuntimeError("down")), debugger=debugger)
            verdict = asyncio.run(matcher.match("red outlet back 4", make_library()))
            events = debugger.get_recent_events()
        finally:
            debugger.close()
        assert verdict.tactic_id == "t3" and verdict.source == "keyword"
        assert any("MATCH_ERROR" in line for line in events)
        assert len(matcher.cache) == 0

    def test_slow_collaborator_times_out(self, tmp_path) -> None:
        """A collaborator slower than the timeout is abandoned."""
        debugger = ResolutionDebugger(str(tmp_path))
        collaborator = FakeCollaborator(MatchVerdict("t1"), delay=1.0)
        try:
            matcher = TacticMatcher(semantic=collaborator, config=MatchingConfig(timeout=0.01), debugger=debugger)
            verdict = asyncio.run(matcher.match("red outlet back 4", make_library()))
            events = debugger.get_recent_events()
        finally:
            debugger.close()
        assert verdict.tactic_id == "t3" and verdict.source == "keyword"
        assert any("MATCH_TIMEOUT" in line for line in events)

    def test_unknown_collaborator_answer_falls_back(self) -> None:
        """Answers naming a tactic that does not exist are ignored."""
        matcher = TacticMatcher(semantic=FakeCollaborator(MatchVerdict("missing")))
        verdict = asyncio.run(matcher.match("defending corner back 4", make_library()))
        assert verdict.tactic_id == "t2" and verdict.source == "keyword"

    def test_stale_cache_entry_is_ignored(self) -> None:
        """Cached verdicts for deleted tactics are not returned."""
        cache = TacticMatchCache(ttl=10, max_entries=4)
        cache.put("red outlet back 4", MatchVerdict("deleted"))
        matcher = TacticMatcher(cache=cache)
        assert asyncio.run(matcher.match("red outlet back 4", make_library())).tactic_id == "t3"

    def test_empty_library(self) -> None:
        """No tactics means no verdict and no collaborator call."""
        collaborator = FakeCollaborator(MatchVerdict("t1"))
        verdict = asyncio.run(TacticMatcher(semantic=collaborator).match("apc", []))
        assert verdict.tactic_id is None and verdict.source == "none"
        assert collaborator.calls == 0

    def test_invalidate_forces_a_new_query(self) -> None:
        """After invalidation the collaborator is asked again."""
        collaborator = FakeCollaborator(MatchVerdict("t1"))
        matcher = TacticMatcher(semantic=collaborator)
        asyncio.run(matcher.match("apc", make_library()))
        matcher.invalidate()
        asyncio.run(matcher.match("apc", make_library()))
        assert collaborator.calls == 2
