"""
End-to-end review flows through Reviewer.

Uses the in-memory directory and scripted operator from conftest.
"""

import pytest

from cobb.api import Reviewer
from cobb.codec import decode
from cobb.config import CobbConfig
from cobb.errors import EmptyMissionError, MissionCancelled, PermissionDeniedError
from cobb.session import SessionState
from cobb.types import HIDDEN_TAG, Action, Command

from conftest import MemoryDirectory, ScriptedOperator, make_block, make_shard


@pytest.fixture
def two_record_dir():
    return MemoryDirectory({
        "2021.txt": make_shard(
            make_block("1-2021", "2021-01-01", ["a"], "one"),
            make_block("2-2021", "2021-02-01", [], "two"),
        ),
    })


class TestOpen:
    def test_granted(self, two_record_dir):
        Reviewer(two_record_dir, ScriptedOperator()).open()
        assert two_record_dir.permission_requests == 0

    def test_requests_when_not_granted(self, two_record_dir):
        two_record_dir.granted = False
        two_record_dir.grant_on_request = True
        Reviewer(two_record_dir, ScriptedOperator()).open()
        assert two_record_dir.permission_requests == 1

    def test_denied(self, two_record_dir):
        two_record_dir.granted = False
        two_record_dir.grant_on_request = False
        with pytest.raises(PermissionDeniedError):
            Reviewer(two_record_dir, ScriptedOperator()).open()

    def test_ops_log(self, two_record_dir, tmp_path):
        config = CobbConfig(path=tmp_path / "cfg")
        reviewer = Reviewer(two_record_dir, ScriptedOperator(), config=config)
        reviewer.open()
        reviewer.start_mission("")
        reviewer.session.add_tag("a2")
        reviewer.session.navigate(1)
        reviewer.close()
        log = (tmp_path / "cfg" / "cobb-ops.log").read_text(encoding="utf-8")
        assert "Saved 1-2021 to 2021.txt" in log


class TestStartMission:
    def test_prompts_for_scope(self, memory_dir):
        operator = ScriptedOperator(scope="2022")
        session = Reviewer(memory_dir, operator).start_mission()
        assert operator.scope_prompts == 1
        assert [r.index for r in session.records] == ["1-2022", "3-2022"]

    def test_explicit_scope_skips_prompt(self, memory_dir):
        operator = ScriptedOperator()
        Reviewer(memory_dir, operator).start_mission("2021")
        assert operator.scope_prompts == 0

    def test_vocabulary_built_from_whole_corpus(self, memory_dir):
        reviewer = Reviewer(memory_dir, ScriptedOperator())
        reviewer.start_mission("2021-07")
        assert list(reviewer.vocabulary) == ["a", "b", HIDDEN_TAG]
        assert reviewer.vocabulary.assignable() == ["a", "b"]

    def test_cancelled_leaves_state(self, memory_dir):
        operator = ScriptedOperator(scope=None)
        reviewer = Reviewer(memory_dir, operator)
        with pytest.raises(MissionCancelled):
            reviewer.start_mission()
        assert reviewer.session is None
        assert operator.notices == ["Mission cancelled."]

    def test_empty_mission_reported(self, memory_dir):
        operator = ScriptedOperator()
        reviewer = Reviewer(memory_dir, operator)
        first = reviewer.start_mission("2021")
        with pytest.raises(EmptyMissionError):
            reviewer.start_mission("1999")
        assert reviewer.session is first
        assert operator.notices == ["No non-hidden records found for scope '1999'."]


class TestScenarios:
    def test_tag_then_navigate_forward(self, two_record_dir):
        reviewer = Reviewer(two_record_dir, ScriptedOperator())
        session = reviewer.start_mission("")
        session.add_tag("b")
        session.navigate(1)

        shard = decode(two_record_dir.files["2021.txt"])
        assert shard[0].index == "1-2021"
        assert shard[0].tags == ["a", "b"]
        assert shard[1].tags == []
        assert shard[1].content == "two"
        assert session.current_index == 1

    def test_hide_then_reload(self):
        directory = MemoryDirectory({
            "2023.txt": make_block("1-2023", "2023-04-01", ["x"], "only"),
            "2022.txt": make_block("1-2022", "2022-04-01", [], "other"),
        })
        operator = ScriptedOperator()
        reviewer = Reviewer(directory, operator)
        session = reviewer.start_mission("2023")
        session.hide()
        assert session.state == SessionState.EXHAUSTED

        with pytest.raises(EmptyMissionError):
            reviewer.start_mission("2023")
        assert decode(directory.files["2023.txt"])[0].tags == sorted(["x", HIDDEN_TAG])
        # Other shards untouched
        assert directory.writes == ["2023.txt"]


class TestRun:
    def test_commands(self, two_record_dir):
        operator = ScriptedOperator(commands=[
            Command(Action.NEW, "b"),
            Command(Action.NEXT),
            Command(Action.ADD, "a"),
            Command(Action.QUIT),
        ])
        Reviewer(two_record_dir, operator).run("")

        shard = decode(two_record_dir.files["2021.txt"])
        assert [r.tags for r in shard] == [["a", "b"], ["a"]]
        positions = [(r[0], r[3], r[4]) for r in operator.rendered]
        assert positions == [("1-2021", 1, 2), ("1-2021", 1, 2), ("2-2021", 2, 2), ("2-2021", 2, 2)]
        assert operator.rendered[1][1] == ["a", "b"]

    def test_none_command_quits_and_saves(self, two_record_dir):
        operator = ScriptedOperator(commands=[Command(Action.REMOVE, "a")])
        Reviewer(two_record_dir, operator).run("")
        assert decode(two_record_dir.files["2021.txt"])[0].tags == []

    def test_boundary_notices(self, two_record_dir):
        operator = ScriptedOperator(commands=[
            Command(Action.PREV), Command(Action.NEXT), Command(Action.NEXT),
        ])
        session = Reviewer(two_record_dir, operator).run("")
        assert operator.notices == [
            "You're at the first record of this mission.",
            "You've reached the last record of this mission.",
        ]
        assert session.current_index == 1
        assert two_record_dir.writes == []

    def test_unknown_tag_rejected(self, two_record_dir):
        operator = ScriptedOperator(commands=[Command(Action.ADD, "nope")])
        Reviewer(two_record_dir, operator).run("")
        assert operator.notices == ["Unknown concept 'nope'. Use 'new' to define it."]
        assert two_record_dir.writes == []

    def test_hidden_marker_needs_hide(self):
        directory = MemoryDirectory({
            "2021.txt": make_shard(
                make_block("1-2021", "2021-01-01", ["a"], "one"),
                make_block("2-2021", "2021-02-01", [], "two"),
                make_block("3-2021", "2021-03-01", [HIDDEN_TAG], "three"),
            ),
        })
        operator = ScriptedOperator(commands=[
            Command(Action.ADD, HIDDEN_TAG),
            Command(Action.TOGGLE, HIDDEN_TAG),
            Command(Action.NEW, HIDDEN_TAG),
            Command(Action.NEXT),
            Command(Action.PREV),
            Command(Action.QUIT),
        ], confirm=False)
        session = Reviewer(directory, operator).run("")

        assert operator.notices == [f"'{HIDDEN_TAG}' is reserved. Use 'hide' to hide a record."] * 3
        assert [r.index for r in session.records] == ["1-2021", "2-2021"]
        assert directory.writes == []

    def test_toggle(self, two_record_dir):
        operator = ScriptedOperator(commands=[Command(Action.TOGGLE, "a"), Command(Action.QUIT)])
        Reviewer(two_record_dir, operator).run("")
        assert decode(two_record_dir.files["2021.txt"])[0].tags == []

    def test_new_prompts_for_name(self, two_record_dir):
        operator = ScriptedOperator(
            commands=[Command(Action.NEW), Command(Action.NEW)],
            new_tag_names=["fresh", "a"],
        )
        reviewer = Reviewer(two_record_dir, operator)
        reviewer.run("")
        assert "fresh" in reviewer.vocabulary
        assert operator.notices == ["Concept 'a' already exists."]
        assert decode(two_record_dir.files["2021.txt"])[0].tags == ["a", "fresh"]

    def test_hide_declined(self, two_record_dir):
        operator = ScriptedOperator(commands=[Command(Action.HIDE)], confirm=False)
        session = Reviewer(two_record_dir, operator).run("")
        assert len(session.records) == 2
        assert two_record_dir.writes == []

    def test_hide_all_completes_mission(self, two_record_dir):
        operator = ScriptedOperator(commands=[Command(Action.HIDE), Command(Action.HIDE)])
        session = Reviewer(two_record_dir, operator).run("")
        assert session.state == SessionState.EXHAUSTED
        assert operator.completed == 1
        assert all(HIDDEN_TAG in r.tags for r in decode(two_record_dir.files["2021.txt"]))

    def test_save_failure_notified(self, two_record_dir):
        two_record_dir.fail_write.add("2021.txt")
        operator = ScriptedOperator(commands=[Command(Action.REMOVE, "a"), Command(Action.NEXT)])
        session = Reviewer(two_record_dir, operator).run("")
        assert operator.notices[0].startswith("Error: Could not save changes to 2021.txt")
        assert session.current_index == 1

    def test_malformed_index_notified(self):
        directory = MemoryDirectory({"misc.txt": make_block("loose", "2021-01-01", [], "x")})
        operator = ScriptedOperator(commands=[Command(Action.NEW, "t"), Command(Action.QUIT)])
        Reviewer(directory, operator).run("")
        assert "has no year segment" in operator.notices[0]
        assert directory.writes == []
