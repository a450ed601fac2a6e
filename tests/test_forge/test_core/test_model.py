from forge.graph.nodes import Choice, DialogueNode, NodeType


def test_accepts_camel_case_and_field_names():
    by_alias = Choice.model_validate({"id": "c1", "text": "Hi", "nextNodeId": "n2", "setFlags": ["a"]})
    by_name = Choice(id="c1", text="Hi", next_node_id="n2", set_flags=["a"])

    assert by_alias == by_name


def test_to_dict_uses_camel_case_and_drops_none():
    node = DialogueNode(id="n1", type=NodeType.CHARACTER, content="Hello", next_node_id="n2")

    data = node.to_dict()

    assert data == {"id": "n1", "type": "CHARACTER", "content": "Hello", "nextNodeId": "n2"}


def test_clone_is_deep():
    node = DialogueNode(
        id="n1",
        type=NodeType.PLAYER,
        choices=[Choice(id="c1", text="Yes", next_node_id="n2")],
    )

    copy = node.clone()
    copy.choices[0].next_node_id = None

    assert node.choices[0].next_node_id == "n2"


def test_unknown_keys_are_ignored():
    node = DialogueNode.model_validate({"id": "n1", "type": "PLAYER", "position": {"x": 1, "y": 2}})

    assert node.id == "n1"
    assert not hasattr(node, "position")
