"""
JSON Repair Prompt
Used for the single retry when the model's JSON output does not parse.
"""

REPAIR_PROMPT_TEMPLATE = """Fix this invalid JSON to match the required schema: {invalid_text}"""
