from advisor_tools.tools import TOOL_HANDLERS, list_tool_specs


def test_tool_registry_matches_handlers():
    spec_names = {spec.name for spec in list_tool_specs()}
    assert spec_names == set(TOOL_HANDLERS)


def test_tenant_scoped_tools_require_tenant_id():
    tenant_tools = {
        "get_user_financial_profile",
        "analyze_spending_vs_market",
        "get_investment_opportunities",
        "get_expense_reduction_suggestions",
    }
    for spec in list_tool_specs():
        schema = spec.describe()["inputSchema"]
        required = set(schema.get("required", []))
        assert ("tenantId" in required) == (spec.name in tenant_tools), spec.name


def test_descriptor_shape():
    for spec in list_tool_specs():
        assert set(spec.describe()) == {"name", "description", "inputSchema"}
