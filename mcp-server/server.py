#!/usr/bin/env python3
"""MCP Server for Budget Waterfall.

This server exposes the budget waterfall state machine as MCP tools,
allowing AI assistants to inspect a budget, edit it, and propose what-if
scenarios that the user can preview, apply or discard.
"""

import os
import sys
import json
import asyncio
import logging
from typing import Any

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from settings import configure_logging, load_settings
from tools import MultiBudgetTools

logger = logging.getLogger(__name__)

# Create the MCP server
server = Server("budget-waterfall")

# Global tools instance (initialized on startup)
tools: MultiBudgetTools | None = None


def get_tools() -> MultiBudgetTools:
    """Get or initialize the tools instance."""
    global tools
    if tools is None:
        settings = load_settings()
        tools = MultiBudgetTools(
            settings.budgets_dir,
            default_budget=settings.default_budget,
            strict=settings.strict_stages,
            history_limit=settings.history_limit,
        )
    return tools


# Common budget parameter schema
BUDGET_PARAM = {
    "type": "string",
    "description": "The budget name (folder in budgets/). If not specified, uses the default budget. Use list_budgets to see available budgets."
}

STEP_PARAM = {
    "type": "string",
    "description": "Category name, e.g. 'Fixed Spend', 'Variable Spend', 'Investments', or 'one_time_spend'"
}

ITEM_PARAM = {
    "type": "string",
    "description": "Line item name within the category, e.g. 'Rent'"
}

AMOUNT_PARAM = {
    "type": "number",
    "description": "Monthly amount in dollars"
}

CHANGE_SCHEMA = {
    "type": "object",
    "properties": {
        "step_name": {
            "type": "string",
            "description": "'Monthly Income' or a category name"
        },
        "item_name": {
            "type": "string",
            "description": "Line item to adjust. Omit for 'Monthly Income'."
        },
        "delta": {
            "type": "number",
            "description": "Dollars added to the current amount (negative to reduce)"
        },
        "recurrence": {
            "type": "string",
            "enum": ["recurring", "one_time"],
            "description": "Whether the change is recurring or one-time"
        },
        "description": {
            "type": "string",
            "description": "Human-readable reason for the change"
        }
    },
    "required": ["step_name", "delta"]
}


def _schema(properties: dict | None = None, required: list | None = None) -> dict:
    return {
        "type": "object",
        "properties": {**(properties or {}), "budget": BUDGET_PARAM},
        "required": required or []
    }


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available budget tools."""
    return [
        Tool(
            name="list_budgets",
            description="List all available budgets with their monthly income and true surplus.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="reload_budgets",
            description="Reload all budgets from disk. Discards in-memory edits, previews and undo history.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="get_waterfall",
            description="Get the budget waterfall: income, each deduction category with the running balance, checkpoints, true surplus and whether the budget is illegal (balance below zero). Includes the pending scenario preview when one exists.",
            inputSchema=_schema()
        ),
        Tool(
            name="get_breakdown",
            description="Get line items of one category, or of every category when step_name is omitted.",
            inputSchema=_schema({"step_name": STEP_PARAM})
        ),
        Tool(
            name="update_monthly_income",
            description="Set the monthly income. Recorded in undo history.",
            inputSchema=_schema({"amount": AMOUNT_PARAM}, ["amount"])
        ),
        Tool(
            name="update_breakdown_item",
            description="Set a line item's amount (adds it when missing). Recorded in undo history.",
            inputSchema=_schema({"step_name": STEP_PARAM, "item_name": ITEM_PARAM, "amount": AMOUNT_PARAM},
                                ["step_name", "item_name", "amount"])
        ),
        Tool(
            name="add_breakdown_item",
            description="Add a line item to a category. Recorded in undo history.",
            inputSchema=_schema({"step_name": STEP_PARAM, "item_name": ITEM_PARAM, "amount": AMOUNT_PARAM},
                                ["step_name", "item_name", "amount"])
        ),
        Tool(
            name="remove_breakdown_item",
            description="Remove a line item from a category. Recorded in undo history.",
            inputSchema=_schema({"step_name": STEP_PARAM, "item_name": ITEM_PARAM},
                                ["step_name", "item_name"])
        ),
        Tool(
            name="rename_breakdown_item",
            description="Rename a line item, keeping its amount and position. Recorded in undo history.",
            inputSchema=_schema({
                "step_name": STEP_PARAM,
                "old_name": {"type": "string", "description": "Current item name"},
                "new_name": {"type": "string", "description": "New item name"}
            }, ["step_name", "old_name", "new_name"])
        ),
        Tool(
            name="preview_scenario",
            description="Propose what-if changes and preview their effect without committing them. Deltas are additive dollar amounts. Use apply_scenario to commit or clear_preview to discard.",
            inputSchema=_schema({
                "changes": {
                    "type": "array",
                    "items": CHANGE_SCHEMA,
                    "description": "Changes applied in order"
                }
            }, ["changes"])
        ),
        Tool(
            name="apply_scenario",
            description="Commit the pending scenario preview. Recorded in undo history.",
            inputSchema=_schema()
        ),
        Tool(
            name="clear_preview",
            description="Discard the pending scenario preview.",
            inputSchema=_schema()
        ),
        Tool(
            name="undo",
            description="Undo the last committed change.",
            inputSchema=_schema()
        ),
        Tool(
            name="redo",
            description="Redo the last undone change.",
            inputSchema=_schema()
        ),
        Tool(
            name="get_history",
            description="Get undo/redo depths and the true surplus of each stored budget version.",
            inputSchema=_schema()
        ),
        Tool(
            name="project_net_worth",
            description="Project net worth month by month from the budget's investment contributions.",
            inputSchema=_schema({
                "months": {
                    "type": "integer",
                    "description": "Number of months to project (default 60)"
                },
                "starting_net_worth": {
                    "type": "number",
                    "description": "Optional: starting net worth in dollars (default 50000)"
                },
                "annual_growth_rate": {
                    "type": "number",
                    "description": "Optional: expected yearly growth as a fraction, e.g. 0.07"
                }
            })
        )
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        bw_tools = get_tools()
        budget = arguments.get("budget")

        if name == "list_budgets":
            result = bw_tools.list_budgets()
        elif name == "reload_budgets":
            result = bw_tools.reload_budgets()
        elif name == "get_waterfall":
            result = bw_tools.get_waterfall(budget)
        elif name == "get_breakdown":
            result = bw_tools.get_breakdown(arguments.get("step_name"), budget)
        elif name == "update_monthly_income":
            result = bw_tools.update_monthly_income(arguments["amount"], budget)
        elif name == "update_breakdown_item":
            result = bw_tools.update_breakdown_item(
                arguments["step_name"], arguments["item_name"], arguments["amount"], budget
            )
        elif name == "add_breakdown_item":
            result = bw_tools.add_breakdown_item(
                arguments["step_name"], arguments["item_name"], arguments["amount"], budget
            )
        elif name == "remove_breakdown_item":
            result = bw_tools.remove_breakdown_item(arguments["step_name"], arguments["item_name"], budget)
        elif name == "rename_breakdown_item":
            result = bw_tools.rename_breakdown_item(
                arguments["step_name"], arguments["old_name"], arguments["new_name"], budget
            )
        elif name == "preview_scenario":
            result = bw_tools.preview_scenario(arguments["changes"], budget)
        elif name == "apply_scenario":
            result = bw_tools.apply_scenario(budget)
        elif name == "clear_preview":
            result = bw_tools.clear_preview(budget)
        elif name == "undo":
            result = bw_tools.undo(budget)
        elif name == "redo":
            result = bw_tools.redo(budget)
        elif name == "get_history":
            result = bw_tools.get_history(budget)
        elif name == "project_net_worth":
            result = bw_tools.project_net_worth(
                arguments.get("months", 60),
                arguments.get("starting_net_worth"),
                arguments.get("annual_growth_rate", 0.0),
                budget
            )
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(
            type="text",
            text=json.dumps(result, indent=2, default=str)
        )]
    except Exception as e:
        logger.error("Tool '%s' failed: %s", name, e)
        return [TextContent(
            type="text",
            text=json.dumps({"error": str(e)}, indent=2)
        )]


async def main():
    """Run the MCP server."""
    configure_logging()
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    asyncio.run(main())
