"""Prompt templates for the creator AI assistant.

Every builder is a pure function: it formats a template and returns the
prompt text. Sending the prompt to a model is the caller's concern.
"""

import json
from typing import Any, Iterable

MARKET_CONTEXT = "South African creators and small businesses"


def _join(values: Iterable[str]) -> str:
    return ", ".join(str(v) for v in values)


PRODUCT_DESCRIPTION_TEMPLATE = """Create a compelling product description for "{product_name}" in the {category} category.

Key features: {features}

Requirements:
- Write an engaging description of 150-200 words
- Focus on benefits, not only features
- Use persuasive but honest language
- Include an emotional connection
- End with a call to action
- Make it suitable for {market}

Format the response as a clean product description ready to paste into a store."""

STORE_BRANDING_TEMPLATE = """Create comprehensive branding guidance for "{store_name}", a store in the {niche} niche targeting {target_audience}.

Provide:
1. Brand personality (3-5 key traits)
2. Colour palette (primary, secondary and accent colours with hex codes)
3. Typography recommendations
4. Brand voice and tone guidelines
5. Logo concept ideas
6. Tagline options (3-5 variations)
7. Visual style direction

Keep it relevant to {market} while still appealing to a global audience."""

MARKETING_COPY_TEMPLATE = """Create marketing copy for the following product to be published on {platform}.

Product: {product}
Goal: {goal}

Requirements:
- Match the tone and format conventions of {platform}
- Include a strong hook in the first line
- Highlight the main benefit clearly
- Add a clear call to action
- Suggest relevant hashtags where the platform uses them
- Keep the voice authentic for {market}"""

SEO_CONTENT_TEMPLATE = """Create SEO-optimised {content_type} content about "{topic}".

Target keywords: {keywords}

Include:
1. An SEO title (under 60 characters)
2. A meta description (under 160 characters)
3. Heading structure (H1, H2, H3)
4. Body content that uses the keywords naturally
5. Internal linking suggestions
6. Local SEO considerations for South Africa"""

PRODUCT_IDEAS_TEMPLATE = """Generate product ideas for a creator in the {niche} niche.

Budget: {budget}
Target audience: {audience}

Provide 8-10 ideas. For each idea include:
1. Product name and short description
2. Estimated production cost
3. Suggested retail price in ZAR
4. Target market appeal
5. Marketing angle
6. Difficulty level (easy, medium or hard)

Favour ideas that suit print-on-demand and digital delivery for {market}."""

STORE_DESIGN_TEMPLATE = """Recommend a store design for the brand "{brand}".

Products: {products}
Preferred style: {style}

Include:
1. Homepage layout and section order
2. Colour scheme and typography
3. Navigation structure
4. Product page layout
5. Trust signals and social proof placement
6. Mobile-first considerations
7. Calls to action and conversion tips"""

SOCIAL_STRATEGY_TEMPLATE = """Create a social media strategy for the brand "{brand}".

Platforms: {platforms}
Goals: {goals}

Provide:
1. Platform-specific content pillars
2. Posting frequency and best times for a South African audience
3. Content formats to prioritise on each platform
4. Engagement tactics
5. Hashtag strategy
6. Collaboration and influencer ideas
7. Metrics to track for each goal"""

EMAIL_MARKETING_TEMPLATE = """Write an email marketing campaign.

Purpose: {purpose}
Audience: {audience}
Product: {product}

Include:
1. Three subject line options
2. Preview text
3. Email body with a clear structure
4. Call to action button text
5. A follow-up email suggestion
6. Best send time for {market}"""

BUSINESS_STRATEGY_TEMPLATE = """Develop a business strategy for a {business_type}.

Goals: {goals}
Timeline: {timeline}

Provide:
1. An executive summary
2. Market analysis for South Africa
3. Revenue streams and pricing approach
4. Marketing and growth plan
5. Operational milestones across the timeline
6. Risks and how to mitigate them
7. Key performance indicators"""

CONTENT_CALENDAR_TEMPLATE = """Create a content calendar for the brand "{brand}" covering {period}.

Themes: {themes}

For each week include:
1. Content topics mapped to the themes
2. Platform and format for each piece
3. Posting dates
4. Captions or headline ideas
5. Relevant South African holidays and events to tie in"""

PRICING_STRATEGY_TEMPLATE = """Recommend a pricing strategy for the following product.

Product: {product}
Market: {market_description}
Competition: {competition}

Include:
1. A recommended price point in ZAR with reasoning
2. Pricing model (premium, competitive, penetration or value-based)
3. Discount and bundle opportunities
4. Psychological pricing tactics
5. How to test and adjust prices over time
6. Profit margin considerations"""

BUSINESS_ADVICE_TEMPLATE = """Give practical business advice to a creator.

Current situation: {situation}
Main challenge: {challenge}
Goals: {goals}

Provide:
1. An assessment of the situation
2. Immediate actions for the next 7 days
3. A 30-day plan
4. Resources and tools that help
5. Common mistakes to avoid

Keep the advice actionable and realistic for {market}."""

ANALYTICS_INSIGHTS_TEMPLATE = """Analyse the following store performance data for the last {timeframe}.

Data:
{data}

Goals: {goals}

Provide:
1. Key trends and patterns
2. What is performing well
3. Areas that need improvement
4. Specific recommendations tied to the goals
5. Metrics to focus on next period"""


def product_description(product_name: str, category: str, features: list[str]) -> str:
    return PRODUCT_DESCRIPTION_TEMPLATE.format(
        product_name=product_name,
        category=category,
        features=_join(features),
        market=MARKET_CONTEXT,
    )


def store_branding(store_name: str, niche: str, target_audience: str) -> str:
    return STORE_BRANDING_TEMPLATE.format(
        store_name=store_name,
        niche=niche,
        target_audience=target_audience,
        market=MARKET_CONTEXT,
    )


def marketing_copy(product: str, platform: str, goal: str) -> str:
    return MARKETING_COPY_TEMPLATE.format(
        product=product, platform=platform, goal=goal, market=MARKET_CONTEXT
    )


def seo_content(topic: str, keywords: list[str], content_type: str) -> str:
    return SEO_CONTENT_TEMPLATE.format(
        topic=topic, keywords=_join(keywords), content_type=content_type
    )


def product_ideas(niche: str, budget: str, audience: str) -> str:
    return PRODUCT_IDEAS_TEMPLATE.format(
        niche=niche, budget=budget, audience=audience, market=MARKET_CONTEXT
    )


def store_design(brand: str, products: list[str], style: str) -> str:
    return STORE_DESIGN_TEMPLATE.format(
        brand=brand, products=_join(products), style=style
    )


def social_strategy(brand: str, platforms: list[str], goals: list[str]) -> str:
    return SOCIAL_STRATEGY_TEMPLATE.format(
        brand=brand, platforms=_join(platforms), goals=_join(goals)
    )


def email_marketing(purpose: str, audience: str, product: str) -> str:
    return EMAIL_MARKETING_TEMPLATE.format(
        purpose=purpose, audience=audience, product=product, market=MARKET_CONTEXT
    )


def business_strategy(business_type: str, goals: list[str], timeline: str) -> str:
    return BUSINESS_STRATEGY_TEMPLATE.format(
        business_type=business_type, goals=_join(goals), timeline=timeline
    )


def content_calendar(brand: str, period: str, themes: list[str]) -> str:
    return CONTENT_CALENDAR_TEMPLATE.format(
        brand=brand, period=period, themes=_join(themes)
    )


def pricing_strategy(product: str, market: str, competition: str) -> str:
    return PRICING_STRATEGY_TEMPLATE.format(
        product=product, market_description=market, competition=competition
    )


def business_advice(situation: str, challenge: str, goals: str) -> str:
    return BUSINESS_ADVICE_TEMPLATE.format(
        situation=situation, challenge=challenge, goals=goals, market=MARKET_CONTEXT
    )


def analytics_insights(data: Any, timeframe: str, goals: list[str]) -> str:
    """Embed ``data`` as indented JSON; decimals and dates fall back to ``str``."""
    return ANALYTICS_INSIGHTS_TEMPLATE.format(
        data=json.dumps(data, indent=2, default=str),
        timeframe=timeframe,
        goals=_join(goals),
    )
