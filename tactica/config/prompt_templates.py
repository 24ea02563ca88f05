"""
Tactica - Prompt Templates
===========================
Centralised prompt management for the strategy advisor and the battle
simulator.  All prompts live here so they can be versioned and reviewed
independently of application logic.

Templates use ``str.format`` placeholders; literal braces are doubled.

Exports
-------
NO_CONTEXT_PLACEHOLDER,
ADVISOR_SYSTEM_PROMPT, ADVISOR_PROMPT_TEMPLATE, ADVISOR_STOP_SEQUENCES,
INTENT_INSTRUCTIONS, UPGRADE_FOCUS_INSTRUCTIONS, ATTACK_TYPE_INSTRUCTIONS,
ATTACK_PURPOSE_INSTRUCTIONS, RESPONSE_ARTIFACTS,
SIMULATION_PROMPT_TEMPLATE, SIMULATION_STOP_SEQUENCES,
TROOP_INFO_FALLBACK, DEFENSE_INFO_FALLBACK.
"""

NO_CONTEXT_PLACEHOLDER: str = "(No relevant reference documents found.)"


# ══════════════════════════════════════════════════════════════════════
#  STRATEGY ADVISOR
# ══════════════════════════════════════════════════════════════════════

ADVISOR_SYSTEM_PROMPT: str = "You are a Clash of Clans Strategy Advisor, knowledgeable about all aspects of the game including troops, buildings, spells, attack strategies, and base designs across all Town Hall levels."

ADVISOR_PROMPT_TEMPLATE: str = """USER QUERY: "{query}"

QUERY ANALYSIS:
{analysis}

RELEVANT CLASH OF CLANS INFORMATION:
{context}

INSTRUCTIONS:
Please provide a comprehensive, accurate response to help the player with their question. Your response should be structured, helpful, and directly address their specific query.
{instructions}

IMPORTANT GUIDELINES:
- Use the provided context information, but don't just repeat it verbatim
- If the context doesn't fully address the query, use your knowledge of Clash of Clans
- Be specific and detailed in your recommendations
- Always cite your sources when providing specific information (e.g., [Document X])
- Only mention troops, spells, buildings, and features that exist in Clash of Clans
- If you're unsure about any information, acknowledge the limitations
- Present your response in a clear, structured format with headings and lists where appropriate
- Focus on practical advice that can be implemented immediately

Based on the user's query and available context, provide your most helpful response now."""

ADVISOR_STOP_SEQUENCES: list[str] = ["USER QUERY:", "QUERY ANALYSIS:", "INSTRUCTIONS:"]

# Keyed by ``Intent.value``; ``{tier}`` and friends are filled per query
INTENT_INSTRUCTIONS: dict[str, str] = {
    "upgrade_priority": """- Focus on providing upgrade priority recommendations
- Consider the player's Town Hall level ({tier})
- Prioritize items that will have the biggest impact on gameplay
- Provide a clear ordering of what to upgrade first, second, etc.
- Consider both offensive and defensive upgrades
- Mention specific unit levels and building levels where appropriate
- Consider resource constraints (gold vs. elixir vs. dark elixir)
- Specify which laboratory upgrades are most valuable""",
    "attack_strategy": """- Recommend a specific, detailed attack strategy
- Include army composition with specific troop counts
- Explain the deployment order and timing
- Mention which spells to use and when
- Consider the target Town Hall level ({tier})
- Explain how to handle common base layouts
- Include hero usage recommendations
- Mention potential backup plans if parts of the attack fail""",
    "base_design": """- Provide base design principles for a {base_type} base
- Consider Town Hall level {tier}
- Explain the placement of key defenses
- Discuss wall arrangement and compartments
- Mention trap placement with specific locations
- Explain how to protect key buildings (Town Hall, resource storages, etc.)
- Provide a logical layout sequence or zones
- Explain how the design counters common attack strategies""",
    "resource_management": """- Provide advice on {goal} {resource_type}
- Consider the player's Town Hall level ({tier})
- Suggest specific farming strategies if appropriate
- Explain upgrade priority from a resource efficiency perspective
- Provide tips for protecting resources from raids
- Mention ways to maximize resource production
- Suggest the best leagues or trophy ranges for resource collection""",
}

UPGRADE_FOCUS_INSTRUCTIONS: dict[str, str] = {
    "offense": """- Focus specifically on offensive upgrades (troops, spells, heroes, army buildings)
- Prioritize units that are versatile across multiple attack strategies""",
    "defense": """- Focus specifically on defensive upgrades (defensive buildings, traps, walls)
- Prioritize defenses that protect against common attack strategies""",
}

ATTACK_TYPE_INSTRUCTIONS: dict[str, str] = {
    "air": """- Focus on air-based strategies
- Explain how to handle air defenses and air bombs""",
    "ground": """- Focus on ground-based strategies
- Explain how to handle walls, traps, and splash damage""",
}

ATTACK_PURPOSE_INSTRUCTIONS: dict[str, str] = {
    "farming": """- Optimize for resource collection rather than total destruction
- Consider army training costs and time""",
    "war": """- Optimize for 3-star attacks
- Assume time is not a constraint for training""",
    "trophy": """- Optimize for securing at least 2 stars consistently
- Balance army training time and effectiveness""",
}

# Prompt headings the model sometimes echoes back
RESPONSE_ARTIFACTS: tuple[str, ...] = ("RELEVANT CLASH OF CLANS INFORMATION:", "IMPORTANT GUIDELINES:", "Based on the user's query and available context,")


# ══════════════════════════════════════════════════════════════════════
#  BATTLE SIMULATOR
# ══════════════════════════════════════════════════════════════════════

TROOP_INFO_FALLBACK: str = "Use your knowledge of Clash of Clans troops, spells, and heroes."
DEFENSE_INFO_FALLBACK: str = "Use your knowledge of Clash of Clans defenses and base structures."

SIMULATION_PROMPT_TEMPLATE: str = """You are a Clash of Clans battle simulation expert. Simulate a battle between the given army and base.

{army}

{base}

## Important Game Information
# Troop Information:
{troop_info}

# Defense Information:
{defense_info}

## INSTRUCTIONS:
Your job is to simulate this battle as precisely as possible, considering troop stats, defense capabilities, and Clash of Clans game mechanics.

YOU MUST STRUCTURE YOUR RESPONSE EXACTLY LIKE THIS:

# Battle Summary
[Provide a 2-3 paragraph summary of how the attack unfolds]

# Attack Strategy Analysis
[Analyze how the provided troops work together in this attack]

# Key Moments
[List 4-5 key moments in the battle]

# Final Result
[State the stars achieved (0-3) and destruction percentage (0-100%)]
Example: "The attack achieved 2 stars with 76% destruction."

# Recommendations
[Provide 3-4 recommendations to improve this attack]

IMPORTANT RULES:
1. ONLY use troops, spells, and heroes from the provided army list
2. DO NOT mention troops that aren't in the army list
3. ALWAYS include an exact destruction percentage (e.g., "65% destruction")
4. ALWAYS state the number of stars achieved (0, 1, 2, or 3)
5. Base this on Clash of Clans mechanics: troops target specific buildings based on preferences, defenses have different ranges and damage
6. ALWAYS include all five sections with the exact headings shown above

Remember:
- 0 stars: less than 50% destruction and Town Hall not destroyed
- 1 star: either 50%+ destruction OR Town Hall destroyed
- 2 stars: 50%+ destruction AND Town Hall destroyed
- 3 stars: 100% destruction

Begin your battle simulation now."""

SIMULATION_STOP_SEQUENCES: list[str] = ["</response>"]
