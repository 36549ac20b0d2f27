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
"""Entry point that resolves a few demo requests and prints the moves."""
import json
from pathlib import Path

from backline.engine.orchestrator import ResolutionOrchestrator, ResolutionResult
from backline.engine.validation import ResolutionError
from backline.models.requests import TemplateParameters, TemplateRequest
from backline.utils.debug import ResolutionDebugger
from backline.utils.payloads import PayloadError, board_from_dict, load_tactics_from_json, request_from_dict
from backline.utils.roster import create_board


def print_result(title: str, result: ResolutionResult) -> None:
    """Print one resolution result.

    Parameters
    ----------
    title : str
        Heading printed above the moves.
    result : ResolutionResult
        Result to display.
    """
    print(f"\n{title}: {result.explanation}")
    for move in result.moves:
        print(f"  {move.target_id:>10} -> ({move.new_position.x:6.2f}, {move.new_position.y:6.2f})")
    for item in result.equipment:
        print(f"  {item.id:>10} placed at ({item.position.x:6.2f}, {item.position.y:6.2f})")
    if result.overlap is not None:
        print(f"  overlap passes: {result.overlap.iterations} (converged={result.overlap.converged})")


def main() -> None:
    """Resolve ``data/request.json`` if present, otherwise a set of demo templates."""
    debugger = ResolutionDebugger()
    tactics_file = Path("data/tactics.json")
    tactics = load_tactics_from_json(str(tactics_file)) if tactics_file.exists() else ()
    orchestrator = ResolutionOrchestrator(tactics=tactics, debugger=debugger)

    request_file = Path("data/request.json")
    try:
        if request_file.exists():
            with request_file.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
            board = board_from_dict(data["board"]) if "board" in data else create_board()
            print_result(str(request_file), orchestrator.resolve(request_from_dict(data["request"]), board))
            return

        print(f"No request file found at {request_file}")
        print("Resolving demo templates...")
        board = create_board()
        demos = [
            ("Red attacking corner", TemplateRequest("APC", "red", parameters=TemplateParameters(batteries=2))),
            ("Blue defensive corner", TemplateRequest("DPC", "blue", parameters=TemplateParameters(runner_count=5))),
            ("Red back 4 outlet", TemplateRequest("outlet", "red", structure="back_4")),
            ("Blue half-court press", TemplateRequest("press", "blue", structure="half_court")),
        ]
        for title, request in demos:
            print_result(title, orchestrator.resolve(request, board))
    except (ResolutionError, PayloadError) as exc:
        print(f"Could not resolve request: {exc}")
    finally:
        debugger.close()


if __name__ == "__main__":
    main()
