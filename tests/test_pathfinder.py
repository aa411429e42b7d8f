import itertools

import pytest

from crmgraph.analytics.config import Config
from crmgraph.analytics.errors import AuthorizationError, NotFound, PERSON_NOT_FOUND_MESSAGE
from crmgraph.analytics.pathfinder import (
    bounded_shortest_path,
    find_all_paths,
    find_path,
    path_quality_score,
)
from crmgraph.analytics.snapshot import load_snapshot
from tests.helpers import OWNER, build, pid


class TestFindPath:
    """Bounded shortest path selection."""

    def test_direct_edge_beats_stronger_two_hop_route(self):
        snap = build([("a", "b", 5), ("a", "c", 3), ("c", "b", 3)])

        result = find_path(snap, "a", "b")

        assert result.path == ["a", "b"]
        assert result.degrees == 1
        assert result.strength == 5

    def test_prefers_stronger_route_at_equal_degrees(self):
        snap = build([("a", "b", 2), ("b", "d", 2), ("a", "c", 5), ("c", "d", 5)])

        result = find_path(snap, "a", "d")

        assert result.path == ["a", "c", "d"]
        assert result.strength == 10
        assert result.weakest_link == 5

    def test_ties_break_on_smallest_ids(self):
        snap = build([("a", "c", 3), ("c", "d", 3), ("a", "b", 3), ("b", "d", 3)])

        assert find_path(snap, "a", "d").path == ["a", "b", "d"]

    def test_same_person_is_zero_degrees(self):
        snap = build([("a", "b", 4)])

        result = find_path(snap, "a", "a")

        assert result.path == ["a"]
        assert result.degrees == 0
        assert result.strength == 0
        assert result.intermediaries == []

    def test_respects_degree_bound(self):
        snap = build([("a", "b", 3), ("b", "c", 3), ("c", "d", 3), ("d", "e", 3)])

        with pytest.raises(NotFound) as exc_info:
            find_path(snap, "a", "e", max_degrees=3)
        assert "3 degrees" in exc_info.value.message

        assert find_path(snap, "a", "e", max_degrees=4).degrees == 4

    def test_unreachable_component(self):
        snap = build([("a", "b", 3)], people=["z"])

        assert bounded_shortest_path(snap, "a", "z", 6) is None
        with pytest.raises(NotFound):
            find_path(snap, "a", "z")

    def test_unknown_endpoint(self):
        snap = build([("a", "b", 3)])

        with pytest.raises(NotFound) as exc_info:
            find_path(snap, "a", "ghost")
        assert exc_info.value.message == PERSON_NOT_FOUND_MESSAGE

    def test_intermediaries_are_interior_people(self):
        snap = build([("a", "b", 3), ("b", "c", 4)])

        result = find_path(snap, "a", "c")

        assert result.intermediaries == [{"id": "b", "name": "B"}]
        assert result.to_dict()["from"] == "a"
        assert result.to_dict()["to"] == "c"

    def test_path_properties_hold_for_every_reachable_pair(self):
        snap = build([
            ("a", "b", 5), ("b", "c", 1), ("c", "d", 2), ("d", "e", 4),
            ("a", "f", 3), ("f", "d", 3), ("e", "g", 5), ("b", "f", 2),
        ])
        bound = 3

        for source, target in itertools.permutations(snap.person_ids(), 2):
            try:
                forward = find_path(snap, source, target, bound)
            except NotFound:
                with pytest.raises(NotFound):
                    find_path(snap, target, source, bound)
                continue

            backward = find_path(snap, target, source, bound)
            assert forward.path[0] == source
            assert forward.path[-1] == target
            assert forward.degrees == len(forward.path) - 1 <= bound
            assert forward.degrees == backward.degrees
            for a, b in zip(forward.path, forward.path[1:]):
                assert snap.edge(a, b) is not None


class TestFindPathFromStorage:
    """Pathfinding against freshly loaded snapshots."""

    def test_alice_to_charlie_through_bob(self, db, scenario):
        snapshot = load_snapshot(db, OWNER)

        result = find_path(snapshot, scenario.alice, scenario.charlie, conn_or_db=db)

        assert result.path == [scenario.alice, scenario.bob, scenario.charlie]
        assert result.degrees == 2
        assert result.strength == 8
        assert result.weakest_link == 3

    def test_isolated_person_is_unreachable(self, db, scenario):
        snapshot = load_snapshot(db, OWNER)

        with pytest.raises(NotFound):
            find_path(snapshot, scenario.alice, scenario.isolated, conn_or_db=db)

    def test_new_relationship_visible_on_next_call(self, db, seed, scenario):
        assert find_path(load_snapshot(db, OWNER), scenario.alice, scenario.charlie).degrees == 2

        seed.relate(scenario.alice, scenario.charlie, 4, "friend")

        result = find_path(load_snapshot(db, OWNER), scenario.alice, scenario.charlie)
        assert result.degrees == 1
        assert result.path == [scenario.alice, scenario.charlie]

    def test_deleted_relationship_visible_on_next_call(self, db, seed, scenario):
        seed.unrelate(scenario.bob, scenario.charlie)

        with pytest.raises(NotFound):
            find_path(load_snapshot(db, OWNER), scenario.alice, scenario.charlie)

    def test_other_owners_person_is_authorization_error(self, db, scenario, other_seed):
        stranger = other_seed.person("Stranger")
        snapshot = load_snapshot(db, OWNER)

        with pytest.raises(AuthorizationError) as exc_info:
            find_path(snapshot, scenario.alice, stranger, conn_or_db=db)

        error = exc_info.value.to_dict()["error"]
        assert error["httpStatus"] == 404
        assert error["message"] == PERSON_NOT_FOUND_MESSAGE
        assert "details" not in error

    def test_unknown_person_is_not_found(self, db, scenario):
        snapshot = load_snapshot(db, OWNER)

        with pytest.raises(NotFound):
            find_path(snapshot, scenario.alice, pid(999), conn_or_db=db)


class TestFindAllPaths:
    """Ranked multi-path search."""

    def setup_method(self):
        self.snap = build([
            ("a", "b", 5, "family"), ("b", "d", 5, "family"),
            ("a", "c", 5, "other"), ("c", "d", 5, "other"),
            ("a", "e", 5, "friend"), ("e", "f", 5, "friend"), ("f", "d", 5, "friend"),
        ])

    def test_ranks_by_degrees_then_quality(self):
        result = find_all_paths(self.snap, "a", "d")

        assert result.found
        assert result.total_found == 3
        assert [p.path for p in result.paths] == [
            ["a", "b", "d"],
            ["a", "c", "d"],
            ["a", "e", "f", "d"],
        ]
        assert result.paths[0].quality_score == 7.5
        assert result.paths[1].quality_score == 2.5

    def test_limit_keeps_total_count(self):
        result = find_all_paths(self.snap, "a", "d", limit=1)

        assert result.total_found == 3
        assert len(result.paths) == 1

    def test_degree_bound(self):
        result = find_all_paths(self.snap, "a", "d", max_degrees=2)
        assert result.total_found == 2

    def test_same_person_rejected(self):
        with pytest.raises(ValueError):
            find_all_paths(self.snap, "a", "a")

    def test_disconnected_people(self):
        snap = build([("a", "b", 3)], people=["z"])

        result = find_all_paths(snap, "a", "z")

        assert not result.found
        assert result.to_dict()["paths"] == []

    def test_small_graph_is_not_truncated(self):
        result = find_all_paths(self.snap, "a", "d")

        assert result.truncated is False
        assert result.to_dict()["truncated"] is False


class TestFindAllPathsEnumerationCap:
    """Dense graphs hold far more simple paths than are ever examined."""

    def setup_method(self):
        people = [f"n{i:02d}" for i in range(14)]
        self.snap = build([(a, b, 3) for a, b in itertools.combinations(people, 2)])

    def test_clique_stops_at_default_cap(self):
        result = find_all_paths(self.snap, "n00", "n13")

        assert result.truncated is True
        assert result.total_found == Config.PATH.ALL_PATHS_MAX_ENUMERATED
        assert len(result.paths) == Config.PATH.ALL_PATHS_LIMIT

    def test_shortest_paths_survive_truncation(self):
        result = find_all_paths(self.snap, "n00", "n13", max_enumerated=50)

        assert result.truncated is True
        assert result.total_found == 50
        assert result.paths[0].path == ["n00", "n13"]
        assert [p.degrees for p in result.paths[1:]] == [2] * 9
        assert result.paths[1].path == ["n00", "n01", "n13"]

    def test_cap_at_exact_count_is_not_truncated(self):
        snap = build([("a", "b", 5), ("b", "d", 5), ("a", "c", 5), ("c", "d", 5)])

        result = find_all_paths(snap, "a", "d", max_enumerated=2)

        assert result.truncated is False
        assert result.total_found == 2


class TestPathQualityScore:

    def test_weights_by_relationship_type(self):
        snap = build([("a", "b", 4, "friend"), ("b", "c", 2, "mentor")])

        assert path_quality_score(snap, ["a", "b"]) == 5.2
        assert path_quality_score(snap, ["b", "c"]) == 1.0
        assert path_quality_score(snap, ["a"]) == 0.0
