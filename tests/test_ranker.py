from schemas import Event
from services.recommend import rank_events


def _event(eid, techs):
    return Event(id=eid, title=eid, required_technologies=techs)


def test_react_node_example():
    e = _event("h1", ["React", "Node.js"])
    out = rank_events({"react": 5, "node.js": 3}, [e])
    assert len(out) == 1
    assert out[0].match_count == 2
    assert out[0].proficiency_score == 8


def test_no_overlap_is_excluded():
    e = _event("h1", ["React", "Node.js"])
    assert rank_events({"Python": 10}, [e]) == []


def test_empty_profile_ranks_nothing():
    events = [_event("h1", ["React"]), _event("h2", [])]
    assert rank_events({}, events) == []
    assert rank_events(None, events) == []


def test_sorted_by_match_count_then_proficiency():
    a = _event("a", ["React"])
    b = _event("b", ["React", "Django"])
    c = _event("c", ["Django"])
    d = _event("d", ["Go"])
    out = rank_events({"React": 5, "django": 1}, [a, b, c, d])
    assert [s.event.id for s in out] == ["b", "a", "c"]
    keys = [(s.match_count, s.proficiency_score) for s in out]
    assert keys == sorted(keys, reverse=True)


def test_ties_keep_input_order():
    x = _event("x", ["React"])
    y = _event("y", ["react"])
    assert [s.event.id for s in rank_events({"react": 2}, [x, y])] == ["x", "y"]
    assert [s.event.id for s in rank_events({"react": 2}, [y, x])] == ["y", "x"]


def test_names_ignore_case_and_whitespace():
    e1 = _event("e1", ["Spring Boot"])
    e2 = _event("e2", ["nextjs"])
    out = rank_events({"springboot": 4, " Next JS ": 2}, [e1, e2])
    assert [(s.event.id, s.proficiency_score) for s in out] == [("e1", 4), ("e2", 2)]


def test_zero_weight_match_is_filtered():
    e1 = _event("e1", ["React"])
    e2 = _event("e2", ["Vue"])
    out = rank_events({"react": 0, "vue": 2}, [e1, e2])
    assert [s.event.id for s in out] == ["e2"]


def test_event_without_required_technologies_is_excluded():
    out = rank_events({"react": 3}, [_event("empty", []), _event("r", ["React"])])
    assert [s.event.id for s in out] == ["r"]


def test_duplicate_required_technology_counts_once():
    out = rank_events({"react": 5}, [_event("dup", ["React", "react "])])
    assert out[0].match_count == 1
    assert out[0].proficiency_score == 5
