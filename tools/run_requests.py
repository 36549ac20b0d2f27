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
"""Resolve every request in a JSON file and report the timings."""
import json
import sys
import time
from pathlib import Path

from backline.engine.orchestrator import ResolutionOrchestrator
from backline.utils.payloads import board_from_dict, request_from_dict
from backline.utils.roster import create_board


def run_requests(path: str, repeat: int = 1) -> None:
    """Resolve each request in ``path`` and print move counts and timings.

    Parameters
    ----------
    path : str
        JSON file with a ``board`` object and a ``requests`` list.
    repeat : int
        How many times to resolve each request when timing it.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    board = board_from_dict(data["board"]) if "board" in data else create_board()
    orchestrator = ResolutionOrchestrator()

    for index, payload in enumerate(data.get("requests", [])):
        request = request_from_dict(payload)
        start = time.perf_counter()
        for _ in range(max(repeat, 1)):
            result = orchestrator.resolve(request, board)
        elapsed_ms = (time.perf_counter() - start) * 1000 / max(repeat, 1)
        converged = result.overlap.converged if result.overlap else True
        print(f"#{index} {payload.get('request')}: {len(result.moves)} moves in {elapsed_ms:.2f}ms (converged={converged})")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: run_requests.py <requests.json> [repeat]")
        sys.exit(1)
    run_requests(sys.argv[1], int(sys.argv[2]) if len(sys.argv) > 2 else 100)
