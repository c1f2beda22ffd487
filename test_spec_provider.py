"""
Tests for the spec provider, fallback spec and world sampler.

A fake chat client stands in for the hosted model; no test needs network
access or an API key.
"""

import json
from types import SimpleNamespace

import pytest

from worldengine.compatibility.spec_validator import SpecValidator
from worldengine.config import EngineConfig
from worldengine.errors import SpecProviderError
from worldengine.inference import spec_provider
from worldengine.inference.fallback import fallback_spec, fallback_tiles
from worldengine.inference.sampler import WorldSampler
from worldengine.inference.spec_provider import build_messages, fetch_spec, load_prompts


class FakeClient:
    """Mimics client.chat.completions.create()."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.requests = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self.create))

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def config(tmp_path):
    return EngineConfig(
        world_size=24,
        whitelist_path=tmp_path / "unicode-whitelist.txt",
        prompts_path=tmp_path / "prompts.json",
        llm_log_path=tmp_path / "llm-spec.log",
        png_path=tmp_path / "debug.png",
    )


def small_spec():
    return {
        "tiles": {
            "background": [{"id": "dirt", "name": "Dirt", "color": "#553311", "walkable": True}],
            "foreground": [{"id": "gem", "name": "Gem", "symbol": "◆", "color": "#00ffff", "walkable": True}],
        },
        "layers": {},
        "ops": [{"type": "paint", "where": {"chance": 0.2, "seed": "g"}, "fg": "gem"}],
    }


def test_fallback_spec_is_valid_and_deterministic():
    spec = fallback_spec("ref")
    assert spec == fallback_spec("ref")
    assert spec["tiles"] != fallback_spec("other")["tiles"]
    ok, errors = SpecValidator().check_spec(spec)
    assert ok, errors
    assert spec["world"]["width"] == 200
    assert [t["id"] for t in spec["tiles"]["background"]] == [f"bg{i}" for i in range(6)]
    assert [t["walkable"] for t in spec["tiles"]["background"]] == [False] + [True] * 5
    assert [t["symbol"] for t in spec["tiles"]["foreground"]] == ["■", "▲", "◆", "●"]


def test_fallback_colors_in_range():
    for tile in fallback_tiles("colors")["background"]:
        channels = [int(tile["color"][i:i + 2], 16) for i in (1, 3, 5)]
        assert all(30 <= c < 230 for c in channels)


def test_fallback_mask_follows_world_size():
    mask = fallback_spec("r", 100, 60)["layers"]["mask"]
    assert (mask["cx"], mask["cy"]) == (50, 30)


def test_no_client_uses_fallback(config, monkeypatch):
    monkeypatch.delenv("TOGETHER_API_KEY", raising=False)
    monkeypatch.setattr(spec_provider, "_client", None)
    assert spec_provider.get_client() is None
    assert fetch_spec("ref", config) == fallback_spec("ref", 24, 24)


def test_model_spec_is_parsed_and_logged(config):
    client = FakeClient(content=json.dumps(small_spec()))
    assert fetch_spec("ref", config, client=client) == small_spec()

    request = client.requests[0]
    assert request["model"] == config.model
    assert request["response_format"] == {"type": "json_object"}
    log = config.llm_log_path.read_text(encoding="utf-8")
    assert "raw" in log and '"dirt"' in log


def test_api_error_falls_back(config):
    client = FakeClient(error=RuntimeError("rate limited"))
    assert fetch_spec("ref", config, client=client) == fallback_spec("ref", 24, 24)
    assert "rate limited" in config.llm_log_path.read_text(encoding="utf-8")


def test_invalid_json_raises(config):
    client = FakeClient(content="here is your world: {")
    with pytest.raises(SpecProviderError):
        fetch_spec("ref", config, client=client)
    assert "parse-error" in config.llm_log_path.read_text(encoding="utf-8")


def test_prompts_file(config):
    config.prompts_path.write_text(json.dumps({"system": "Build worlds.", "user": "Make a JSON swamp."}), encoding="utf-8")
    assert load_prompts(config.prompts_path) == ("Build worlds.", "Make a JSON swamp.")

    client = FakeClient(content="{}")
    fetch_spec("ref", config, client=client)
    messages = client.requests[0]["messages"]
    # User prompt already mentions JSON, so the system prompt is left alone
    assert messages[0] == {"role": "system", "content": "Build worlds."}
    assert messages[1] == {"role": "user", "content": "Make a JSON swamp."}


def test_broken_prompts_file(config):
    config.prompts_path.write_text("{nope", encoding="utf-8")
    with pytest.raises(SpecProviderError):
        load_prompts(config.prompts_path)


def test_build_messages_adds_json_instruction():
    messages = build_messages("castle", "Be creative.", "")
    assert messages[0]["content"].startswith("You are a generator. Return a JSON object only.")
    assert messages[0]["content"].endswith("Be creative.")
    assert '"castle"' in messages[1]["content"]


def test_sampler_pins_size_and_sanitizes(config):
    spec = small_spec()
    spec["world"] = {"width": 999, "height": 3}
    sampler = WorldSampler(config, client=FakeClient(content=json.dumps(spec)))
    world = sampler.generate_world("gems")

    assert world["area"]["width"] == 24 and world["area"]["height"] == 24
    # "◆" is not ASCII and no whitelist file exists
    assert world["tiles"]["foreground"][0]["symbol"] != "◆"
    assert len(world["tiles"]["foreground"][0]["symbol"]) == 1
    assert sampler.last_stats["ops_executed"] == 1


def test_sampler_respects_whitelist_file(config):
    config.whitelist_path.write_text("◆", encoding="utf-8")
    sampler = WorldSampler(config, client=FakeClient(content=json.dumps(small_spec())))
    world = sampler.generate_world("gems")
    assert world["tiles"]["foreground"][0]["symbol"] == "◆"


def test_sampler_fills_missing_tiles(config):
    spec = {"ops": [{"type": "paint", "bg": "bg3"}]}
    sampler = WorldSampler(config, client=FakeClient(content=json.dumps(spec)))
    world = sampler.generate_world("bare")
    assert world["tiles"]["background"] == fallback_tiles("bare")["background"]
    assert world["area"]["cells"][0][0] == ["bg3", None]


def test_sampler_non_object_spec_uses_fallback(config):
    sampler = WorldSampler(config, client=FakeClient(content="[1, 2, 3]"))
    world = sampler.generate_world("list")
    assert [t["id"] for t in world["tiles"]["background"]] == [f"bg{i}" for i in range(6)]


def test_sampler_writes_outfile(config, tmp_path):
    config.outfile = str(tmp_path / "world.json")
    sampler = WorldSampler(config, client=FakeClient(error=RuntimeError("offline")))
    message = sampler.generate_world("file")
    assert message == f"Wrote terrain JSON to {tmp_path / 'world.json'}"
    saved = json.loads((tmp_path / "world.json").read_text(encoding="utf-8"))
    assert saved["area"]["width"] == 24


def test_sampler_rejects_non_string_reference(config):
    with pytest.raises(TypeError):
        WorldSampler(config, client=FakeClient(content="{}")).generate_world(7)


def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("WORLD_ENGINE_SIZE", "5000")
    monkeypatch.setenv("WORLD_ENGINE_MODEL", "some/model")
    monkeypatch.setenv("WORLD_ENGINE_OUTFILE", "out.json")
    monkeypatch.setenv("WORLD_ENGINE_LLM_LOG", str(tmp_path / "x.log"))
    config = EngineConfig.from_env()
    assert config.world_size == 2048
    assert config.model == "some/model"
    assert config.outfile == "out.json"
    assert config.llm_log_path == tmp_path / "x.log"

    monkeypatch.setenv("WORLD_ENGINE_SIZE", "big")
    assert EngineConfig.from_env().world_size == 200
