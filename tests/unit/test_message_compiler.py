import pytest

from oracle.models import OPENAI_MODELS
from oracle.prompt import Prompt
from oracle.providers.base import (
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ROLE_USER,
    ImageBlock,
    TextBlock,
    artifacts,
    compile_messages,
)
from oracle.providers.openai import ChatGPT
from oracle.providers.vertex import Vertex
from oracle.references import PNG_SIGNATURE, classify_all
from oracle.strategy import Strategy, select_strategy

PNG_BYTES = PNG_SIGNATURE + b"pixels"


class _Sink:
    def write(self, data: bytes) -> int:
        return len(data)


def _prompt(n: int, references: tuple[object, ...] = ()) -> Prompt:
    return Prompt(
        purpose="P",
        input_history=tuple(f"q{i}" for i in range(n)),
        output_history=tuple(f"a{i}" for i in range(n)),
        question="Q",
        references=classify_all(references),
    )


@pytest.mark.parametrize("n", [0, 1, 3])
@pytest.mark.parametrize("r", [0, 2])
def test_message_count_with_system_message(n: int, r: int) -> None:
    prompt = _prompt(n, tuple(f"ref{i}" for i in range(r)))
    messages = compile_messages(prompt, OPENAI_MODELS["gpt-4o"])
    assert len(messages) == 1 + 2 * n + 1 + r
    assert messages[0].role == ROLE_SYSTEM
    assert messages[0].joined_text() == "P"


def test_purpose_omitted_when_model_lacks_system_messages() -> None:
    messages = compile_messages(_prompt(2, ("ref",)), OPENAI_MODELS["o1-mini"])
    assert len(messages) == 2 * 2 + 1 + 1
    assert all(m.role != ROLE_SYSTEM for m in messages)
    assert messages[0].joined_text() == "q0"


def test_history_then_question_then_references() -> None:
    messages = compile_messages(_prompt(1, ("alpha",)), OPENAI_MODELS["gpt-4o"])
    assert [(m.role, m.joined_text()) for m in messages] == [
        (ROLE_SYSTEM, "P"),
        (ROLE_USER, "q0"),
        (ROLE_ASSISTANT, "a0"),
        (ROLE_USER, "Q"),
        (ROLE_USER, "Reference 1: alpha"),
    ]


def test_reference_labels_follow_inlined_position() -> None:
    prompt = _prompt(0, (_Sink(), "alpha", PNG_BYTES, "beta"))
    messages = compile_messages(prompt, OPENAI_MODELS["gpt-4o"])
    tail = messages[2:]
    assert tail[0].joined_text() == "Reference 1: alpha"
    assert tail[1].has_image
    assert tail[2].joined_text() == "Reference 3: beta"
    assert len(artifacts(prompt)) == 1


def test_purpose_pair_for_schema_without_system_role() -> None:
    vertex = Vertex(project_id="proj", token="tok")
    messages = vertex.compile(_prompt(2, ("ref",)))
    assert len(messages) == 2 + 2 * 2 + 1 + 1
    assert messages[0].role == ROLE_USER
    assert messages[0].joined_text() == "SYSTEM: USER PROVIDED PURPOSE: P"
    assert messages[1].role == ROLE_ASSISTANT
    assert messages[1].joined_text() == "Understood!"


def test_compiling_twice_is_byte_identical() -> None:
    client = ChatGPT("sk-test")
    prompt = _prompt(2, ("alpha", PNG_BYTES))
    strategy = select_strategy(prompt.get_references())
    first = client.build_request(client.compile(prompt), strategy)
    second = client.build_request(client.compile(prompt), strategy)
    assert first.content() == second.content()


def test_text_and_image_reference_scenario() -> None:
    prompt = _prompt(0, ("It's time to shine", PNG_BYTES))
    assert select_strategy(prompt.get_references()) is Strategy.VISION

    messages = compile_messages(prompt, OPENAI_MODELS["gpt-4o"])
    blocks = [block for m in messages[2:] for block in m.blocks]
    assert blocks == [
        TextBlock("Reference 1: It's time to shine"),
        ImageBlock(PNG_BYTES),
    ]
