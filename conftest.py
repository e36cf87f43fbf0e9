"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Shared layout tree and plan fixtures
"""

from __future__ import annotations

import pytest
from dotenv import load_dotenv

from uiforge.ir import LayoutNode, Plan

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Common Test Fixtures
# =============================================================================


@pytest.fixture
def table_plan() -> Plan:
    """Container with a single Table carrying structured props.

    Returns:
        Plan whose tree is Container > Table.
    """
    return Plan(
        intent="Show a list of users",
        layout_tree=LayoutNode(
            type="Container",
            children=[
                LayoutNode(
                    type="Table",
                    props={
                        "columns": [{"key": "name", "header": "Name"}],
                        "data": [{"name": "Ada"}],
                    },
                )
            ],
        ),
    )


@pytest.fixture
def form_plan() -> Plan:
    """Create a login form plan for testing.

    Returns:
        Plan with a Card holding inputs and a submit button.
    """
    return Plan(
        intent="Login form",
        layout_tree=LayoutNode(
            type="Center",
            props={"maxWidth": "sm"},
            children=[
                LayoutNode(
                    type="Card",
                    props={"title": "Sign in", "variant": "elevated"},
                    children=[
                        LayoutNode(
                            type="Stack",
                            props={"gap": "md"},
                            children=[
                                LayoutNode(
                                    type="Input",
                                    props={"type": "email", "label": "Email"},
                                ),
                                LayoutNode(
                                    type="Input",
                                    props={"type": "password", "label": "Password"},
                                ),
                                LayoutNode(
                                    type="Button",
                                    props={
                                        "children": "Sign in",
                                        "fullWidth": True,
                                        "variant": "primary",
                                    },
                                ),
                            ],
                        )
                    ],
                )
            ],
        ),
    )


@pytest.fixture
def dashboard_plan() -> Plan:
    """Create a dashboard plan with navigation, sidebar and a chart.

    Returns:
        Plan exercising nested containers and structured props.
    """
    return Plan(
        intent="Analytics dashboard",
        layout_tree=LayoutNode(
            type="Container",
            props={"maxWidth": "full", "padding": "none"},
            children=[
                LayoutNode(
                    type="Navbar",
                    props={
                        "brand": "Acme",
                        "items": [{"label": "Home", "active": True}, {"label": "Reports"}],
                        "variant": "dark",
                    },
                ),
                LayoutNode(
                    type="Stack",
                    props={"direction": "horizontal", "gap": "lg"},
                    children=[
                        LayoutNode(
                            type="Sidebar",
                            props={"items": [{"label": "Overview"}], "width": "sm"},
                        ),
                        LayoutNode(
                            type="Card",
                            props={"title": "Revenue"},
                            children=[
                                LayoutNode(
                                    type="Chart",
                                    props={
                                        "type": "line",
                                        "height": 240,
                                        "data": [
                                            {"label": "Jan", "value": 10},
                                            {"label": "Feb", "value": 12.5},
                                        ],
                                    },
                                )
                            ],
                        ),
                    ],
                ),
            ],
        ),
    )
