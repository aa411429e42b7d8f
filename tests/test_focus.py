import pytest

from crmgraph.analytics.errors import NotFound
from crmgraph.analytics.focus import degree_connections, focus_graph
from tests.helpers import build


@pytest.fixture
def chain():
    return build(
        [("a", "b", 5), ("b", "c", 4), ("c", "d", 3), ("d", "e", 2)],
        people=["f"],
    )


class TestFocusGraph:

    def test_limited_depth(self, chain):
        view = focus_graph(chain, "a", 2)

        assert [(n["id"], n["degree_from_focus"]) for n in view.nodes] == [
            ("a", 0), ("b", 1), ("c", 2),
        ]
        assert view.nodes[0]["is_focal_person"]
        assert not view.nodes[1]["is_focal_person"]
        assert [(l["source"], l["target"]) for l in view.links] == [("a", "b"), ("b", "c")]
        assert view.total_connections == 2
        assert view.cumulative_counts == {"n0": 1, "n1": 2, "n2": 3}

    def test_all_degrees(self, chain):
        view = focus_graph(chain, "a", "all")

        assert view.total_connections == 4
        assert view.cumulative_counts == {
            "n0": 1, "n1": 2, "n2": 3, "n3": 4, "n4": 5, "n5": 5, "n6": 5,
        }

    def test_to_dict(self, chain):
        payload = focus_graph(chain, "c", 1).to_dict()

        assert payload["focal_person"] == {"id": "c", "name": "C"}
        assert payload["degree_counts"] == {"0": 1, "1": 2}
        assert payload["max_degrees"] == 1
        assert payload["total_connections"] == 2

    def test_isolated_focus(self, chain):
        view = focus_graph(chain, "f", 3)

        assert view.total_connections == 0
        assert view.links == []

    def test_unknown_person(self, chain):
        with pytest.raises(NotFound):
            focus_graph(chain, "ghost")


class TestDegreeConnections:

    def test_cumulative_reach(self, chain):
        assert degree_connections(chain, "a") == {"n1": 1, "n2": 2, "n3": 3}
        assert degree_connections(chain, "c") == {"n1": 2, "n2": 4, "n3": 4}

    def test_unknown_person_has_no_reach(self, chain):
        assert degree_connections(chain, "ghost") == {"n1": 0, "n2": 0, "n3": 0}
