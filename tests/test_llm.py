from types import SimpleNamespace

import pytest

import didactica.llm as llm


class Chunk:
    def __init__(self, text=None, error=False):
        self._text = text
        self._error = error

    @property
    def text(self):
        if self._error:
            raise ValueError("no text part")
        return self._text


class FakeModel:
    instances = []

    def __init__(self, name, system_instruction=None):
        self.name = name
        self.system_instruction = system_instruction
        self.calls = []
        FakeModel.instances.append(self)

    def generate_content(self, prompt, generation_config=None, stream=False):
        self.calls.append({"prompt": prompt, "config": generation_config, "stream": stream})
        return FakeModel.response


@pytest.fixture
def fake_model(monkeypatch):
    FakeModel.instances = []
    monkeypatch.setattr(llm.genai, "GenerativeModel", FakeModel)
    return FakeModel


def test_stream_skips_empty_chunks(fake_model):
    fake_model.response = [Chunk("Hola "), Chunk(""), Chunk(error=True), Chunk("món")]
    out = list(llm.stream_gemini("prompt", system="sys", model="gemini-x", temperature=0.3))
    assert out == ["Hola ", "món"]
    model = fake_model.instances[0]
    assert model.name == "gemini-x"
    assert model.system_instruction == "sys"
    assert model.calls[0]["stream"] is True
    assert model.calls[0]["config"].temperature == pytest.approx(0.3)


def test_stream_defaults_to_configured_model(fake_model):
    fake_model.response = []
    list(llm.stream_gemini("prompt"))
    assert fake_model.instances[0].name == llm.MODEL_NAME


def test_json_mode(fake_model):
    fake_model.response = Chunk('[{"title": "A", "snippet": "B"}]')
    raw = llm.ask_gemini_json("prompt", {"type": "ARRAY"})
    assert raw.startswith("[")
    config = fake_model.instances[0].calls[0]["config"]
    assert config["response_mime_type"] == "application/json"
    assert config["response_schema"] == {"type": "ARRAY"}


def _part(data=None, text=None):
    inline = SimpleNamespace(data=data) if data else None
    return SimpleNamespace(inline_data=inline, text=text)


def test_image_from_inline_data(fake_model):
    content = SimpleNamespace(parts=[_part(text="Aquí la tens"), _part(data=b"img")])
    fake_model.response = SimpleNamespace(candidates=[SimpleNamespace(content=content)])
    assert llm.generate_image("un far") == b"img"
    assert fake_model.instances[0].name == llm.IMAGE_MODEL


def test_image_missing(fake_model):
    content = SimpleNamespace(parts=[_part(text="no puc")])
    fake_model.response = SimpleNamespace(candidates=[SimpleNamespace(content=content)])
    assert llm.generate_image("un far") is None
