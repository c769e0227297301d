#!/usr/bin/env python3
"""
Fetch Google results for "serp api" through the OpenAI Responses API, with the
FetchSERP MCP server attached as a remote tool.

Needs OPENAI_API_KEY, FETCHSERP_API_TOKEN and MCP_SERVER_URL in the
environment or a .env file.
"""
import json
import os
import sys
import time
from pprint import pprint

from dotenv import load_dotenv
from openai import OpenAI, OpenAIError

MODEL = "gpt-4.1"
POLL_INTERVAL = 2


def mcp_tool(server_url, token):
    return {
        "type": "mcp",
        "server_label": "fetchserp",
        "server_url": server_url,
        "headers": {"Authorization": f"Bearer {token}"},
    }


def find_output(response, item_type, name=None):
    for item in response.output or []:
        if item.type != item_type:
            continue
        if name is None or (getattr(item, "name", None) == name and item.output):
            return item
    return None


def main():
    load_dotenv()
    api_key = os.environ.get("OPENAI_API_KEY")
    token = os.environ.get("FETCHSERP_API_TOKEN")
    server_url = os.environ.get("MCP_SERVER_URL")
    if not (api_key and token and server_url):
        print(
            "Please set OPENAI_API_KEY, FETCHSERP_API_TOKEN, and MCP_SERVER_URL "
            "inside a .env file or your shell environment.",
            file=sys.stderr,
        )
        return 1

    client = OpenAI(api_key=api_key)
    tools = [mcp_tool(server_url, token)]
    keyword = "serp api"

    try:
        response = client.responses.create(
            model=MODEL,
            tools=tools,
            input=f'Fetch the Google search results for the keyword "{keyword}".',
        )

        while True:
            approval = find_output(response, "mcp_approval_request")
            if approval is not None:
                print("Approving tool request from the model...")
                response = client.responses.create(
                    model=MODEL,
                    previous_response_id=response.id,
                    tools=tools,
                    input=[
                        {
                            "type": "mcp_approval_response",
                            "approval_request_id": approval.id,
                            "approve": True,
                        }
                    ],
                )
                continue

            tool_call = find_output(response, "mcp_call", name="get_serp_results")
            if tool_call is not None:
                print("SERP results received!\n")
                try:
                    pprint(json.loads(tool_call.output))
                except json.JSONDecodeError:
                    print(tool_call.output)
                return 0

            if response.status == "completed":
                print("The model answered without calling get_serp_results:\n")
                print(response.output_text)
                return 0

            print("Waiting for tool execution to finish...")
            time.sleep(POLL_INTERVAL)
            response = client.responses.retrieve(response.id)
    except OpenAIError as e:
        print(f"Error while calling OpenAI: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
