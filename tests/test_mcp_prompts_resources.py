import asyncio
import json
from types import SimpleNamespace

import pytest
from mcp.server.fastmcp import FastMCP

from finvest_server.cache.media_cache import MediaCache
from finvest_server.prompts.portfolio_prompts import register_portfolio_prompts
from finvest_server.resources.media_resources import register_media_resources
from finvest_server.resources.portfolio_resources import register_portfolio_resources


class _MockPortfolioService:
    def __init__(self) -> None:
        self.state = SimpleNamespace(advice="")

    def current_snapshot(self) -> dict[str, object]:
        return {"uri": "portfolio://current", "payload": {"asset_count": 2}}

    def list_assets(self) -> list[dict[str, object]]:
        return [{"id": "1", "ticker": "PETR4"}]


def _services() -> SimpleNamespace:
    return SimpleNamespace(portfolio=_MockPortfolioService(), media=MediaCache())


def test_prompts_list_and_get_happy_path() -> None:
    mcp = FastMCP(name="test-prompts")
    register_portfolio_prompts(mcp)

    prompts = asyncio.run(mcp.list_prompts())
    assert {prompt.name for prompt in prompts} >= {"portfolio_analysis", "vision_board"}

    prompt_result = asyncio.run(mcp.get_prompt("portfolio_analysis", {"focus": "retirement"}))
    rendered = str(prompt_result.messages[0].content.text)
    assert "retirement" in rendered
    assert "Diversification analysis" in rendered

    vision = asyncio.run(mcp.get_prompt("vision_board", {"goal": "buy a house"}))
    assert "generate_vision_board_image" in vision.messages[0].content.text


def test_prompt_invalid_name() -> None:
    mcp = FastMCP(name="test-prompts-invalid-name")
    register_portfolio_prompts(mcp)

    with pytest.raises(ValueError, match="Unknown prompt"):
        asyncio.run(mcp.get_prompt("unknown_prompt", {"focus": "x"}))


def test_prompt_missing_required_argument() -> None:
    mcp = FastMCP(name="test-prompts-missing-arg")
    register_portfolio_prompts(mcp)

    with pytest.raises(ValueError, match="Missing required argument"):
        asyncio.run(mcp.get_prompt("portfolio_analysis", {}))


def test_prompt_blank_argument() -> None:
    mcp = FastMCP(name="test-prompts-blank-arg")
    register_portfolio_prompts(mcp)

    with pytest.raises(ValueError, match="focus"):
        asyncio.run(mcp.get_prompt("portfolio_analysis", {"focus": "  "}))


def test_resources_list_and_read_happy_path() -> None:
    mcp = FastMCP(name="test-resources")
    register_portfolio_resources(mcp, _services())

    resources = asyncio.run(mcp.list_resources())
    uris = {str(resource.uri) for resource in resources}
    assert {"portfolio://current", "portfolio://assets", "portfolio://advice"} <= uris

    contents = asyncio.run(mcp.read_resource("portfolio://current"))
    assert len(contents) == 1
    assert contents[0].mime_type == "application/json"
    assert json.loads(contents[0].content)["payload"]["asset_count"] == 2

    assets = asyncio.run(mcp.read_resource("portfolio://assets"))
    assert json.loads(assets[0].content)[0]["ticker"] == "PETR4"


def test_advice_resource_not_found_until_generated() -> None:
    mcp = FastMCP(name="test-advice-resource")
    services = _services()
    register_portfolio_resources(mcp, services)

    with pytest.raises(Exception) as exc:
        asyncio.run(mcp.read_resource("portfolio://advice"))
    message = str(exc.value)
    assert "Advice resource not found" in message
    assert "api_key" not in message.lower()

    services.portfolio.state.advice = "## Diversification"
    contents = asyncio.run(mcp.read_resource("portfolio://advice"))
    assert contents[0].content == "## Diversification"
    assert contents[0].mime_type == "text/markdown"


def test_video_resource_template() -> None:
    mcp = FastMCP(name="test-media-resources")
    services = _services()
    register_media_resources(mcp, services)

    templates = asyncio.run(mcp.list_resource_templates())
    assert any(template.uriTemplate == "media://videos/{media_id}" for template in templates)

    handle = services.media.put(b"\x00mp4")
    contents = asyncio.run(mcp.read_resource(handle.uri))
    assert contents[0].content == b"\x00mp4"
    assert contents[0].mime_type == "video/mp4"

    with pytest.raises(Exception, match="not found or expired"):
        asyncio.run(mcp.read_resource("media://videos/unknown"))
