#!/usr/bin/env python3
"""
Ask Claude a ranking question and let it answer with the FetchSERP MCP tools.

Claude's MCP connector reaches the server over HTTPS from Anthropic's side, so
MCP_SERVER_URL must be publicly reachable (Let's Encrypt, or ngrok in front of
a local server).

Usage: python scripts/simple_claude_mcp_example.py [--help]
"""
import argparse
import json
import os
import sys

import anthropic
from dotenv import load_dotenv

DEFAULT_MCP_SERVER_URL = "https://mcp.fetchserp.com:8000/sse"
MODEL = "claude-sonnet-4-20250514"
MCP_BETA = "mcp-client-2025-04-04"
REQUEST_TIMEOUT = 30.0

QUESTION = (
    "Who is ranking 3rd on Google for the keyword 'serp api'? "
    "Please use your search tools to get current results."
)

GREEN = "\033[32m"
BLUE = "\033[34m"
YELLOW = "\033[33m"
RED = "\033[31m"
CYAN = "\033[36m"
BOLD = "\033[1m"
RESET = "\033[0m"

SETUP_HELP = f"""
{CYAN}Setup (HTTPS with Let's Encrypt):
  1. export DOMAIN="mcp.fetchserp.com"
     export LE_EMAIL="your-email@fetchserp.com"
     export LE_STAGING="true"  # staging while testing
  2. MCP_HTTPS_MODE=true fetchserp-mcp
  3. python scripts/simple_claude_mcp_example.py{RESET}

{YELLOW}Environment variables:
  CLAUDE_API_KEY       Anthropic API key
  FETCHSERP_API_TOKEN  FetchSERP API token, forwarded as the MCP bearer token
  MCP_SERVER_URL       default {DEFAULT_MCP_SERVER_URL}{RESET}

{GREEN}Claude connects to the server, calls the SERP tools it needs and
answers from the live results.{RESET}
"""


def log(message, color=RESET):
    print(f"{color}{message}{RESET}")


def ask_claude_with_mcp(client, question, mcp_server_url, token):
    log(f'\n🤖 Asking Claude: "{question}"', YELLOW)
    return client.beta.messages.create(
        model=MODEL,
        max_tokens=1024,
        messages=[{"role": "user", "content": question}],
        mcp_servers=[
            {
                "type": "url",
                "url": mcp_server_url,
                "name": "fetchserp",
                "authorization_token": token,
                "tool_configuration": {"enabled": True},
            }
        ],
        betas=[MCP_BETA],
    )


def display_response(response):
    log("\n📋 Claude's Response:", BOLD + BLUE)
    for block in response.content:
        if block.type == "text":
            log(f"\n💬 {block.text}", GREEN)
        elif block.type == "mcp_tool_use":
            log(f"\n🔧 Used MCP Tool: {block.name}", YELLOW)
            log(f"   Server: {block.server_name}", YELLOW)
            log(f"   Input: {json.dumps(block.input)}", YELLOW)
        elif block.type == "mcp_tool_result":
            if block.is_error:
                log("\n📊 Tool Result: Error", RED)
            else:
                log("\n📊 Tool Result: Success", GREEN)


def print_server_hints():
    log("\n💡 To start the HTTPS MCP server:", YELLOW)
    log('   1. export DOMAIN="mcp.fetchserp.com" LE_EMAIL="you@fetchserp.com"', YELLOW)
    log("   2. MCP_HTTPS_MODE=true fetchserp-mcp", YELLOW)
    log("   3. Make sure DNS for the domain points at the server", YELLOW)


def run_example():
    claude_api_key = os.environ.get("CLAUDE_API_KEY")
    token = os.environ.get("FETCHSERP_API_TOKEN")
    mcp_server_url = os.environ.get("MCP_SERVER_URL", DEFAULT_MCP_SERVER_URL)

    log("\n🚀 Simple Claude API + MCP Server Example (HTTPS)", BOLD + BLUE)
    log("=" * 55, BLUE)

    if not claude_api_key:
        log("\n💥 Error: CLAUDE_API_KEY environment variable not set", RED)
        return 1
    if not token:
        log("\n💥 Error: FETCHSERP_API_TOKEN environment variable not set", RED)
        return 1

    log(f"\n🔗 MCP Server: {mcp_server_url}", BLUE)
    client = anthropic.Anthropic(api_key=claude_api_key, timeout=REQUEST_TIMEOUT)

    try:
        log("\n🤖 Making Claude API request with MCP connector...", CYAN)
        response = ask_claude_with_mcp(client, QUESTION, mcp_server_url, token)
    except anthropic.APIConnectionError as e:
        log(f"\n💥 Error: could not reach the Claude API: {e}", RED)
        return 1
    except anthropic.APIStatusError as e:
        log(f"\n💥 Error: Claude API error {e.status_code}", RED)
        log(json.dumps(e.body, indent=2), RED)
        if "Failed to connect to MCP server" in str(e.body):
            print_server_hints()
        return 1

    display_response(response)
    log("\n✅ Example completed successfully!", BOLD + GREEN)
    return 0


def main():
    load_dotenv()
    parser = argparse.ArgumentParser(
        description="Simple Claude API + FetchSERP MCP server example",
        epilog=SETUP_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.parse_args()
    return run_example()


if __name__ == "__main__":
    sys.exit(main())
