from forge.graph.flags import FlagSchema, FlagType
from forge.graph.graph import DialogueGraph, GraphKind, Storylet


def test_end_node_objects_are_flattened(guard_graph):
    assert guard_graph.end_node_ids == ["friend", "gate"]
    assert guard_graph.is_end_node("gate")
    assert not guard_graph.is_end_node("start")


def test_node_lookup(guard_graph):
    assert guard_graph.get_node("ask").id == "ask"
    assert guard_graph.get_node("missing") is None
    assert guard_graph.get_node(None) is None
    assert guard_graph.has_node("friend")


def test_defaults():
    graph = DialogueGraph()
    assert graph.kind is GraphKind.NARRATIVE
    assert graph.start_node_id == "start"
    assert graph.nodes == []


def test_document_round_trip(guard_graph):
    document = guard_graph.to_dict()
    again = DialogueGraph.model_validate(document)

    assert again.to_dict() == document
    assert again.get_node("start").next_node_id == "ask"
    assert document["nodes"][0]["type"] == "CHARACTER"


def test_storylet_entry_node():
    graph = DialogueGraph(start_node_id="intro")
    assert Storylet(id="s", dialogue=graph).entry_node_id == "intro"
    assert Storylet(id="s", dialogue=graph, start_node_id="middle").entry_node_id == "middle"
    assert Storylet(id="s").entry_node_id is None


def test_flag_schema_lookup():
    schema = FlagSchema.model_validate({
        "flags": [
            {"id": "met_guard", "type": "dialogue"},
            {"id": "gold", "type": "item", "valueType": "number", "defaultValue": 5},
        ]
    })

    assert "gold" in schema
    assert "silver" not in schema
    assert schema.get("gold").default_value == 5
    assert [f.id for f in schema.of_type(FlagType.DIALOGUE)] == ["met_guard"]
