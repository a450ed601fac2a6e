import asyncio

import pytest

from forge.graph.nodes import ConditionalBlockType, DialogueNode, NodeType
from forge.yarn.builders import YarnTextBuilder
from forge.yarn.converter import parse_yarn_content
from forge.yarn.errors import HandlerNotFoundError
from forge.yarn.handlers import CharacterHandler, ConditionalHandler, PlayerHandler
from forge.yarn.registry import HandlerRegistry, create_default_registry


def export(handler, node):
    return asyncio.run(handler.export_node(node, YarnTextBuilder()))


def reimport(handler, text):
    [block] = parse_yarn_content(text)
    return asyncio.run(handler.import_node(block))


def test_character_round_trip():
    handler = CharacterHandler()
    node = DialogueNode(
        id="intro", type=NodeType.CHARACTER, speaker="Guard",
        content="Halt!\nWho goes there?", set_flags=["met_guard"], next_node_id="ask",
    )

    text = export(handler, node)
    again = reimport(handler, text)

    assert text == (
        "title: intro\n"
        "---\n"
        "Guard: Halt!\n"
        "Guard: Who goes there?\n"
        "<<set $met_guard = true>>\n"
        "<<jump ask>>\n"
        "===\n\n"
    )
    assert again == node


def test_character_keeps_compound_commands_in_content():
    handler = CharacterHandler()
    node = DialogueNode(id="pay", type=NodeType.CHARACTER, content="Thanks. <<set $gold -= 5>>")

    again = reimport(handler, export(handler, node))

    assert again.content == "Thanks.\n<<set $gold -= 5>>"
    assert again.set_flags is None


def test_character_with_variants():
    handler = CharacterHandler()
    node = DialogueNode.model_validate({
        "id": "greet",
        "type": "CHARACTER",
        "speaker": "Guard",
        "content": "Hello.",
        "nextNodeId": "ask",
        "conditionalBlocks": [
            {
                "id": "greet_block_0",
                "type": "if",
                "condition": [{"flag": "noble", "operator": "is_set"}],
                "content": "My lord.",
                "speaker": "Guard",
            },
        ],
    })

    again = reimport(handler, export(handler, node))

    assert again.content == "Hello."
    assert again.next_node_id == "ask"
    [variant] = again.conditional_blocks
    assert variant.type is ConditionalBlockType.IF
    assert variant.content == "My lord."
    assert variant.speaker == "Guard"
    assert variant.condition[0].flag == "noble"


def test_player_round_trip():
    handler = PlayerHandler()
    node = DialogueNode.model_validate({
        "id": "ask",
        "type": "PLAYER",
        "choices": [
            {"id": "ask_choice_0", "text": "A friend.", "nextNodeId": "friend", "setFlags": ["friendly"]},
            {
                "id": "ask_choice_1",
                "text": "I have a pass.",
                "nextNodeId": "gate",
                "conditions": [{"flag": "gold", "operator": "greater_than", "value": 3}],
            },
            {"id": "ask_choice_2", "text": "Nobody. <<set $suspicion += 1>>", "nextNodeId": "suspicious"},
        ],
    })

    again = reimport(handler, export(handler, node))

    assert again == node


def test_player_prompt_and_speaker():
    handler = PlayerHandler()
    text = (
        "title: ask\n"
        "---\n"
        "Guard: State your business.\n"
        "-> Trade\n"
        "    <<jump shop>>\n"
        "-> Leave\n"
        "===\n"
    )

    node = reimport(handler, text)

    assert node.speaker == "Guard"
    assert node.content == "State your business."
    assert [c.text for c in node.choices] == ["Trade", "Leave"]
    assert node.choices[0].next_node_id == "shop"
    assert node.choices[1].next_node_id is None


def test_conditional_round_trip():
    handler = ConditionalHandler()
    node = DialogueNode.model_validate({
        "id": "check",
        "type": "CONDITIONAL",
        "nextNodeId": "after",
        "conditionalBlocks": [
            {
                "id": "check_block_0",
                "type": "if",
                "condition": [{"flag": "gold", "operator": "greater_equal", "value": 10}],
                "content": "Rich!",
                "speaker": "Guard",
                "nextNodeId": "rich",
                "setFlags": ["noticed"],
            },
            {
                "id": "check_block_1",
                "type": "elseif",
                "condition": [{"flag": "broke", "operator": "is_not_set"}],
                "content": "Average.",
            },
            {"id": "check_block_2", "type": "else", "content": "Poor."},
        ],
    })

    text = export(handler, node)
    again = reimport(handler, text)

    assert text.index("<<endif>>") < text.index("<<jump after>>")
    assert again == node


def test_registry_lookup():
    registry = create_default_registry()

    assert isinstance(registry.get_handler(NodeType.CHARACTER), CharacterHandler)
    assert isinstance(registry.get_handler("npc"), CharacterHandler)
    assert registry.has_handler(NodeType.DETOUR)
    assert not registry.has_handler(NodeType.RANDOMIZER)
    assert not registry.has_handler("cutscene")

    with pytest.raises(HandlerNotFoundError):
        registry.get_handler(NodeType.RANDOMIZER)
    with pytest.raises(HandlerNotFoundError):
        registry.get_handler("cutscene")


def test_registry_replaces_handlers():
    class LoudCharacterHandler(CharacterHandler):
        pass

    registry = HandlerRegistry()
    registry.register_handler(NodeType.CHARACTER, CharacterHandler())
    registry.register_handler("CHARACTER", LoudCharacterHandler())

    assert isinstance(registry.get_handler(NodeType.CHARACTER), LoudCharacterHandler)
    assert registry.registered_types == [NodeType.CHARACTER]


def test_handler_can_handle():
    handler = PlayerHandler()
    assert handler.can_handle("PLAYER")
    assert not handler.can_handle(NodeType.CHARACTER)
    assert not handler.can_handle("cutscene")
    assert repr(handler) == "PlayerHandler(PLAYER)"
