"""Portfolio and vision board prompt definitions."""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP


def _build_portfolio_analysis_prompt(focus: str) -> str:
    topic = focus.strip()
    if not topic:
        raise ValueError("Missing required argument: focus.")
    return (
        "You are a senior financial analyst.\n"
        "Read the portfolio://current resource and review the portfolio with a focus on "
        f"'{topic}'. Provide:\n"
        "1) Diversification analysis (concentration by asset type)\n"
        "2) Rebalancing suggestions\n"
        "3) A 0-10 health score with a one-line justification."
    )


def _build_vision_board_prompt(goal: str) -> str:
    text = goal.strip()
    if not text:
        raise ValueError("Missing required argument: goal.")
    return (
        "Write a vivid, single-paragraph image prompt for a 16:9 vision board that represents "
        f"this financial goal: '{text}'. Describe setting, lighting and mood; avoid text in the image. "
        "Then call generate_vision_board_image with that prompt."
    )


def register_portfolio_prompts(mcp: FastMCP) -> None:
    @mcp.prompt(
        name="portfolio_analysis",
        title="Portfolio Analysis Prompt",
        description="Generate a structured analysis prompt for the current portfolio.",
    )
    def portfolio_analysis(focus: str) -> str:
        return _build_portfolio_analysis_prompt(focus)

    @mcp.prompt(
        name="vision_board",
        title="Vision Board Prompt",
        description="Turn a financial goal into an image prompt for the vision board tool.",
    )
    def vision_board(goal: str) -> str:
        return _build_vision_board_prompt(goal)
