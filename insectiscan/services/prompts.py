"""
Prompt templates for bite diagnosis, plant and animal identification, and
healing comparison.

All prompts follow the same medical-safety rules:
- Ask for a fixed, labelled response grammar the parser understands
- Give the model an explicit way out ("Not a ...:") for off-topic photos
- Always end with a disclaimer line
"""

UNIVERSAL_SYSTEM_INSTRUCTION = (
    "You are a helpful assistant. Provide concise, structured responses using "
    "labeled sections. Include disclaimers when necessary."
)

DEFAULT_SYMPTOM_TEXT = (
    "Red or irritated skin after outdoor exposure. Unknown cause. "
    "Slight swelling and itchiness."
)

UNKNOWN = "Unknown"
NONE = "None"

# =============================================================================
# BITE DIAGNOSIS
# =============================================================================

BITE_PROFILE_TEMPLATE = """User Profile:
- Age: {age}
- Gender: {gender}
- Skin Color: {skin_color}
- Allergies: {allergies}
- Medical Conditions: {medical_conditions}"""

BITE_DIAGNOSIS_PROMPT = """You are an expert in dermatology and entomology specializing in insect bite identification. Analyze the image and user data to determine the likely cause of a skin reaction.

{profile}

{environment}

User Notes: {notes}

**FIRST:** Determine if the image actually shows a bug bite, sting, or related skin reaction. If you're confident it is NOT a bug bite or sting (e.g., it's a random object, unrelated skin condition, or non-medical image), respond with ONLY:

{sentinel} [Brief explanation of what the image actually shows]

HOWEVER, if it appears to be a possible bug bite, sting, or related skin reaction, respond in this EXACT format:

Insect or Cause: [Most likely insect or cause]

Pattern Description: [Brief description of bite appearance]

Severity: [Brief assessment of severity]

Recommended Care: [1-3 concise treatment recommendations]

Recommended Products:
- [Product] – [Brief description]
- [Product] – [Brief description]

Possible Risks: [Brief mention of potential complications]

When to Seek Medical Attention: [1-2 clear indicators for medical care]

Danger Level (1-10): [Number between 1-10]

Confidence: [High/Medium/Low] - [Brief reason for confidence level]

Disclaimer: This is not a medical diagnosis and should not replace professional medical advice."""

# =============================================================================
# PLANT IDENTIFICATION
# =============================================================================

PLANT_IDENTIFICATION_PROMPT = """Identify the plant in this image and provide key safety information. User notes: "{notes}"
{location}

If the image clearly does not show a plant, respond with ONLY:

{sentinel} [Brief explanation of what the image actually shows]

Otherwise respond in this format:

Species: [Most likely plant name]

Appearance: [Brief description]

Toxicity: [Non-toxic/Mildly toxic/Moderately toxic/Highly toxic]

Common Uses (if any): [Brief description if applicable]

Region or Habitat: [Brief description]

Notes: [Any important additional information]

Confidence: [High/Medium/Low]

Disclaimer: This is not a scientific identification or medical recommendation."""

# =============================================================================
# ANIMAL IDENTIFICATION
# =============================================================================

ANIMAL_IDENTIFICATION_PROMPT = """Identify the animal in this image and assess potential risks. User notes: "{notes}"
{location}

If the image clearly does not show an animal, respond with ONLY:

{sentinel} [Brief explanation of what the image actually shows]

Otherwise respond in this format:

Species: [Most likely animal identification]

Behavior Observed: [Brief description based on image]

Typical Habitat: [Where this animal is commonly found]

Risk to Humans: [None/Low/Moderate/High] - [Brief explanation]

Conservation Status: [Common/Threatened/Endangered/Protected]

Confidence: [High/Medium/Low]

Disclaimer: This is an AI-generated identification and may not be fully accurate."""

# =============================================================================
# HEALING COMPARISON
# =============================================================================

HEALING_COMPARISON_PROMPT = """Compare these two wound photos:
- First photo: Day 1
- Second photo: Day {days_since}

User notes: "{notes}"

If either photo clearly does not show a wound, bite or skin reaction, respond with ONLY:

{sentinel} [Brief explanation of what the image actually shows]

Based on the appearance, provide a concise assessment:

Healing Status: [Healing/Unchanged/Worsening]

Size: [Increased/Decreased/Same]

Color: [Better/Worse/Same]

Swelling: [Better/Worse/Same]

Treatment Recommendation: [Brief 1-2 sentence advice]

When to Seek Medical Care: [Specific warning signs]

Explanation: [2-3 sentences max]

Confidence: [High/Medium/Low]

Do not give extensive medical advice."""
