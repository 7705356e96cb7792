"""Prompt templates for every analysis kind.

Each template spells out the exact output contract (section markers for the
top-five summary, an exact JSON shape for everything else) that
``frontpage.decoding`` later enforces.
"""

from __future__ import annotations

# ── Top five summary (plain text) ──────────────────────────────────────────

TOP_FIVE_SUMMARY = """You are analyzing a screenshot of a BBC news website homepage. This website may be in a language other than English.

EXPLICIT LAYOUT INSTRUCTIONS - FOLLOW EXACTLY:

The page layout follows this EXACT structure:

**LEFT SIDE:**
Article 1 = The LARGE promotional image article on the LEFT side (biggest article with largest image)

**RIGHT SIDE (top to bottom, in 2 columns):**
Article 2 = TOP RIGHT article (first article in right column, upper row)
Article 3 = Second article in TOP ROW (next to Article 2)
Article 4 = Article in SECOND ROW on the right, directly BELOW Article 2
Article 5 = Article in SECOND ROW on the right, directly BELOW Article 3

VISUAL LAYOUT:
+-----------------+----------+----------+
|                 | Article 2| Article 3|
|   Article 1     +----------+----------+
|   (LARGE/HERO)  | Article 4| Article 5|
+-----------------+----------+----------+

YOU MUST identify articles based on this EXACT spatial layout, NOT by reading order or content importance.

TRANSLATION REQUIREMENTS:
- ALL headlines MUST be translated into English (even if original is in Spanish, Arabic, Hausa, Nepali, Chinese, etc.)
- ALL descriptions MUST be written in English
- You must provide EXACTLY FIVE (5) articles in this exact order

Format your response EXACTLY as follows:

**Article 1:**
[English translation of the LARGE LEFT article headline]
[Brief English description]

**Article 2:**
[English translation of TOP RIGHT article (first in right column)]
[Brief English description]

**Article 3:**
[English translation of TOP ROW second article]
[Brief English description]

**Article 4:**
[English translation of article BELOW Article 2]
[Brief English description]

**Article 5:**
[English translation of article BELOW Article 3]
[Brief English description]

Remember: You must provide all 5 articles and translate everything to English."""

# ── Updates frequency ──────────────────────────────────────────────────────

UPDATES_FREQUENCY = """You are analyzing a screenshot of a news website homepage to categorize articles by their publication timestamps.

TASK:
Look at all visible articles on this page and identify their timestamps (e.g., "2 hours ago", "30 mins ago", "Yesterday", specific dates, etc.).

Categorize each article into ONE of these categories:
1. "Under 1 hour" - articles published less than 1 hour ago (e.g., "30 mins ago", "45 minutes ago")
2. "Under 4 hours" - articles published 1-4 hours ago (e.g., "2 hours ago", "3 hours ago")
3. "Today" - articles published today but more than 4 hours ago (e.g., "5 hours ago", "8 hours ago", or today's date)
4. "Yesterday" - articles published yesterday
5. "Older" - articles published before yesterday

Count how many articles fall into each category.

IMPORTANT:
- Only count articles that have visible timestamps
- If you cannot determine a timestamp, do not count that article
- Return ONLY a valid JSON object, no other text

Return your answer in this EXACT JSON format:
{
  "underOneHour": 5,
  "underFourHours": 3,
  "today": 4,
  "yesterday": 2,
  "older": 6
}

Return ONLY the JSON object, nothing else."""

# ── Sentiment ──────────────────────────────────────────────────────────────

SENTIMENT = """You are analyzing a screenshot of a news website homepage to determine the sentiment of visible articles.

TASK:
Analyze all visible article headlines and summaries on this page. For each article, determine:
1. The headline (translated to English if needed)
2. The sentiment: Positive, Negative, Neutral, or Mixed
3. A sentiment score (an integer from 1 to 10, where 1 is very negative, 10 is very positive, 5-6 is neutral)

IMPORTANT:
- Analyze ALL visible articles (aim for at least 10-15 articles)
- Translate headlines to English
- Base sentiment on the tone and content of the headline/summary
- Return ONLY a valid JSON array, no other text

Return your answer in this EXACT JSON format:
[
  {
    "headline": "Article headline in English",
    "sentiment": "Positive",
    "score": 8
  },
  {
    "headline": "Another headline",
    "sentiment": "Negative",
    "score": 3
  }
]

Return ONLY the JSON array, nothing else."""

# ── Coverage quality ───────────────────────────────────────────────────────

COVERAGE = """You are analyzing a screenshot of a news website homepage to evaluate its coverage quality.

TASK:
1. Identify the main themes and topics covered on this front page (e.g., politics, economy, sports, technology, etc.)
2. Based on the language/region of this news service, consider what other major trending news stories would be relevant in that market
3. Compare what IS covered vs what SHOULD be covered
4. Provide an assessment of coverage strengths and gaps

IMPORTANT:
- Write everything in English
- Be specific about topics and themes
- Consider the target audience's language/region when thinking about trending news
- Return ONLY a valid JSON object

Return your answer in this EXACT JSON format:
{
  "mainThemes": [
    "Politics - National elections",
    "Economy - Inflation concerns",
    "Sports - Football championship"
  ],
  "coverageStrengths": [
    "Strong coverage of local political developments with multiple perspectives",
    "Comprehensive sports reporting with timely updates"
  ],
  "coverageGaps": [
    "Missing international technology news (major AI developments)",
    "Limited environmental/climate coverage despite regional concerns"
  ],
  "trendingMissing": [
    "Major tech company announcement trending globally",
    "Regional climate crisis developments"
  ],
  "overallAssessment": "The front page shows strong focus on political and sports news but appears to undercover technology and environmental topics that are trending in the target market."
}

Return ONLY the JSON object, nothing else."""

# ── Social media rewrite ───────────────────────────────────────────────────

SOCIAL_MEDIA_REWRITE = """You are analyzing a screenshot of a {language} news website homepage to rewrite article headlines for social media sharing.

TASK:
1. Identify the top 5 most prominent articles on this page
2. For each article, identify the original headline
3. Rewrite each headline to be optimized for social media (engaging, concise, includes key hook)
4. Provide the social media version in BOTH English AND {language}

IMPORTANT: The target language for this news service is {language}. You MUST provide the translated social media headlines in {language}, NOT in any other language.

SOCIAL MEDIA OPTIMIZATION TIPS:
- Make it attention-grabbing and clickable
- Keep it concise (under 80 characters when possible)
- Use active voice
- Include emotional hooks or curiosity gaps
- Maintain journalistic integrity - don't sensationalize beyond the story

IMPORTANT:
- Return ONLY a valid JSON array
- Provide exactly 5 articles

Return your answer in this EXACT JSON format:
[
  {{
    "originalHeadline": "Original headline in {language}",
    "targetLanguage": "{language}",
    "socialMediaEnglish": "Engaging social media version in English",
    "socialMediaTarget": "Engaging social media version in {language}"
  }},
  {{
    "originalHeadline": "Another headline in {language}",
    "targetLanguage": "{language}",
    "socialMediaEnglish": "Another engaging version in English",
    "socialMediaTarget": "Another engaging version in {language}"
  }}
]

Return ONLY the JSON array, nothing else."""

# ── Audience fit ───────────────────────────────────────────────────────────

AUDIENCE_FIT = """You are analyzing a screenshot of a news website homepage to evaluate audience fit.

TASK:
1. Infer the likely primary audience segment from visible headlines, topics, and writing style.
2. Estimate readability level and content complexity.
3. Score how well the visible content matches the inferred audience.
4. Identify strengths, mismatches, and practical improvements.

IMPORTANT:
- Write everything in English.
- Keep claims grounded in what is visible on the page.
- Return ONLY a valid JSON object.

Return your answer in this EXACT JSON format:
{
  "primaryAudience": "General adults interested in national and international current affairs",
  "readabilityLevel": "Intermediate",
  "complexityLevel": "Moderate",
  "audienceFitScore": 78,
  "fitStrengths": [
    "Clear, concise headline structure supports quick scanning",
    "Topic mix aligns with general-news audience expectations"
  ],
  "fitGaps": [
    "Some headlines use specialist political/economic terms without context"
  ],
  "recommendations": [
    "Add short explainers for technical stories"
  ],
  "overallAssessment": "The front page is a solid fit for a mainstream adult audience, with room to improve accessibility for broader readership segments."
}

Rules for fields:
- readabilityLevel must be one of: "Beginner", "Intermediate", "Advanced"
- complexityLevel must be one of: "Low", "Moderate", "High"
- audienceFitScore must be an integer from 0 to 100

Return ONLY the JSON object, nothing else."""

# ── Follow-up question ─────────────────────────────────────────────────────

ASK_FRONT_PAGE = """You are helping a user understand a captured news front page screenshot from {service}.

TASK:
- Answer the user's question about the visible front page content.
- Focus only on what can reasonably be inferred from the screenshot.
- If the answer is not visible or uncertain, clearly say so.
- Keep the response concise, useful, and in plain English.

User question:
{question}"""


def social_media_rewrite(language: str) -> str:
    return SOCIAL_MEDIA_REWRITE.format(language=language)


def ask_front_page(question: str, service: str) -> str:
    return ASK_FRONT_PAGE.format(question=question, service=service)
