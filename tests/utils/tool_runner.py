import logging
import re

import pytest

logger = logging.getLogger(__name__)


def get_test_id(test_config):
    """Readable pytest id for a live tool test"""
    return test_config["name"]


async def run_tool_test(client, context: dict, test_config: dict) -> dict:
    """
    Ask the LLM client to call one tool and check the values it reports back.

    Args:
        client: The client fixture
        context: Module-scoped dictionary carrying values between dependent tests
        test_config: Configuration for the specific tool test

    Returns:
        The updated context dictionary
    """
    if test_config.get("skip", False):
        pytest.skip(f"Test {test_config['name']} marked to skip")

    missing_deps = [dep for dep in test_config.get("depends_on", []) if dep not in context]
    if missing_deps:
        pytest.skip(f"Missing dependencies: {', '.join(missing_deps)}")

    tool_name = test_config["name"]
    expected_keywords = test_config["expected_keywords"]
    description = test_config["description"]

    if "args_template" in test_config:
        args = test_config["args_template"].format(**context)
    else:
        args = test_config.get("args", "")

    keywords_str = ", ".join(expected_keywords)
    prompt = (
        "Execute these instructions precisely without recommendations "
        "or best practice suggestions:\n\n"
        f"1. Use the {tool_name} tool to get {description} "
        f"with the following arguments: {args}.\n"
        "2. Only pass required arguments. "
        "For any missing required arguments, supply reasonable values.\n"
        "3. After using the tool, extract only the following values "
        f"from the response: {keywords_str}\n"
        "4. Format your response as 'keyword: extracted_value' "
        f"for each keyword in {keywords_str}\n"
        "5. If the tool returns an error, respond with 'error_message: [the error]'\n"
        "6. If a value is empty but valid, use '[]' as the value\n\n"
        "Example response format:\n"
        "keyword1: extracted_value1\n"
        "keyword2: []\n"
    )

    response = await client.process_query(prompt)
    print(f"Response: {response}")

    if "error_message" in response.lower():
        pytest.fail(f"API error for {tool_name}: {response}")

    missing_keywords = [
        keyword for keyword in expected_keywords if keyword.lower() not in response.lower()
    ]
    if missing_keywords:
        pytest.fail(f"{tool_name}: keywords not found: {', '.join(missing_keywords)}")

    for key, pattern in test_config.get("regex_extractors", {}).items():
        match = re.search(pattern, response, re.DOTALL | re.IGNORECASE)
        if not match:
            logger.info(f"Failed to extract {key} using pattern: {pattern}")
            pytest.fail(f"Failed to extract '{key}' using pattern '{pattern}' from response")
        context[key] = match.group(1).strip()
        print(f"Extracted {key}: {context[key]}")

    return context
