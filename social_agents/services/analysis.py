"""Keyword and regex heuristics standing in for real text/image analysis."""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence

POSITIVE_WORDS = ("bon", "super", "excellent", "génial", "fantastique", "heureux", "content", "aimer", "adorer")
NEGATIVE_WORDS = ("mauvais", "terrible", "horrible", "détester", "triste", "déçu", "nul", "médiocre", "pire")

TOPIC_KEYWORDS: Dict[str, Sequence[str]] = {
    "technologie": ("tech", "technologie", "ai", "ia", "intelligence artificielle", "ordinateur", "smartphone", "application"),
    "politique": ("politique", "gouvernement", "élection", "président", "ministre", "débat"),
    "sport": ("sport", "football", "tennis", "match", "équipe", "championnat", "olympique", "joueur"),
    "divertissement": ("film", "série", "musique", "concert", "acteur", "chanteur", "cinéma", "télévision"),
    "santé": ("santé", "médecine", "docteur", "hôpital", "maladie", "traitement", "bien-être"),
}

CURRENT_TRENDS: Dict[str, Sequence[str]] = {
    "IA générative": ("ai", "ia", "intelligence artificielle", "generative", "génératif", "gpt", "chatgpt", "claude"),
    "Jeux Olympiques": ("jo", "olympique", "olympics", "médaille", "paris2025"),
    "Changement climatique": ("climat", "réchauffement", "environnement", "durable", "écologie"),
    "Nouvelle technologie blockchain": ("crypto", "blockchain", "nft", "web3", "bitcoin", "ethereum"),
}

# Per-platform multipliers applied to the overall engagement score.
PLATFORM_ESTIMATES: Dict[str, Dict[str, float]] = {
    "twitter": {"likeEstimate": 0.8, "retweetEstimate": 0.3, "replyEstimate": 0.2},
    "instagram": {"likeEstimate": 4, "commentEstimate": 0.15, "saveEstimate": 0.2},
    "facebook": {"likeEstimate": 2, "shareEstimate": 0.25, "commentEstimate": 0.3},
    "linkedin": {"likeEstimate": 1.5, "shareEstimate": 0.2, "commentEstimate": 0.4},
    "default": {"likeEstimate": 1, "shareEstimate": 0.2, "commentEstimate": 0.3},
}
PLATFORM_ESTIMATES["x"] = PLATFORM_ESTIMATES["twitter"]

_PERSON_RE = re.compile(r"[A-Z][a-z]+\s+[A-Z][a-z]+")
_LOCATION_RE = re.compile(r"\b(?:à|en|au|aux|du|des)\s+([A-Z][a-zA-Zé-]+)")
_ORG_RE = re.compile(r"[A-Z]{2,}|[A-Z][a-z]+\s+(?:Inc\.|Corp\.|SA|SAS|SARL)")
_HASHTAG_RE = re.compile(r"#([a-zA-Z0-9_]+)")


def analyze_sentiment(text: str) -> Dict[str, Any]:
    positive = negative = 0
    for word in text.lower().split():
        if any(p in word for p in POSITIVE_WORDS):
            positive += 1
        if any(n in word for n in NEGATIVE_WORDS):
            negative += 1

    score = 0.0
    if positive + negative:
        score = (positive - negative) / (positive + negative)
    if score > 0.2:
        label = "positive"
    elif score < -0.2:
        label = "negative"
    else:
        label = "neutral"
    return {"score": score, "label": label, "confidence": 0.7}


def _match_keywords(text: str, keywords: Sequence[str]) -> List[str]:
    return [kw for kw in keywords if kw in text]


def extract_topics(text: str) -> List[Dict[str, Any]]:
    lowered = text.lower()
    topics = []
    for name, keywords in TOPIC_KEYWORDS.items():
        matches = _match_keywords(lowered, keywords)
        if matches:
            topics.append(
                {"name": name, "confidence": min(len(matches) / 3, 1), "matchedKeywords": matches}
            )
    topics.sort(key=lambda topic: topic["confidence"], reverse=True)
    return topics


def _entity(text: str, entity_text: str, entity_type: str, confidence: float) -> Dict[str, Any]:
    start = text.find(entity_text)
    return {
        "text": entity_text,
        "type": entity_type,
        "confidence": confidence,
        "startChar": start,
        "endChar": start + len(entity_text),
    }


def extract_entities(text: str) -> List[Dict[str, Any]]:
    entities = [_entity(text, m.group(0), "PERSON", 0.8) for m in _PERSON_RE.finditer(text)]
    entities += [_entity(text, m.group(1), "LOCATION", 0.7) for m in _LOCATION_RE.finditer(text)]
    entities += [_entity(text, m.group(0), "ORGANIZATION", 0.75) for m in _ORG_RE.finditer(text)]
    return entities


def extract_hashtags(text: str) -> List[Dict[str, str]]:
    return [{"hashtag": m.group(0), "text": m.group(1)} for m in _HASHTAG_RE.finditer(text)]


def detect_objects() -> List[Dict[str, Any]]:
    return [
        {"name": "personne", "confidence": 0.92, "boundingBox": {"x": 10, "y": 20, "width": 100, "height": 200}},
        {"name": "téléphone", "confidence": 0.85, "boundingBox": {"x": 150, "y": 120, "width": 50, "height": 30}},
        {"name": "tasse", "confidence": 0.78, "boundingBox": {"x": 200, "y": 150, "width": 40, "height": 40}},
    ]


def detect_scenes() -> List[Dict[str, Any]]:
    return [
        {"name": "intérieur", "confidence": 0.88},
        {"name": "bureau", "confidence": 0.75},
        {"name": "urbain", "confidence": 0.32},
    ]


def extract_image_text() -> Dict[str, Any]:
    return {
        "text": "Exemple de texte détecté dans l'image",
        "confidence": 0.82,
        "blocks": [
            {"text": "Exemple", "boundingBox": {"x": 50, "y": 100, "width": 60, "height": 20}},
            {"text": "de texte", "boundingBox": {"x": 120, "y": 100, "width": 70, "height": 20}},
            {"text": "détecté", "boundingBox": {"x": 50, "y": 130, "width": 60, "height": 20}},
            {"text": "dans l'image", "boundingBox": {"x": 120, "y": 130, "width": 100, "height": 20}},
        ],
    }


def moderate_image() -> Dict[str, Any]:
    return {
        "isAdult": False,
        "isViolent": False,
        "isOffensive": False,
        "safeScore": 0.96,
        "categories": {"adult": 0.02, "violence": 0.01, "offensive": 0.03},
    }


def predict_engagement(
    text: str,
    platform: str,
    hashtags: Optional[List[Dict[str, str]]],
    media_count: int,
    topics: Optional[List[Dict[str, Any]]],
) -> Dict[str, Any]:
    """Score a post from 0 to 100 and suggest improvements."""
    length_factor = min(len(text) / 200, 1) * 0.8
    hashtag_factor = min(len(hashtags) / 3, 1) * 0.7 if hashtags else 0
    media_factor = min(media_count, 4) / 4 * 0.9 if media_count else 0
    topics_factor = 0.0
    if topics is not None:
        topics_factor = sum(t["confidence"] for t in topics) / max(len(topics), 1) * 0.6

    score = min((length_factor + hashtag_factor + media_factor + topics_factor) / 3 * 100, 100)
    multipliers = PLATFORM_ESTIMATES.get(platform.lower(), PLATFORM_ESTIMATES["default"])

    suggestions = []
    if length_factor < 0.6:
        suggestions.append({
            "type": "content_length",
            "suggestion": (
                "Considérez ajouter plus de contenu pour améliorer l'engagement"
                if len(text) < 100
                else "Raccourcissez votre texte pour une meilleure lisibilité"
            ),
        })
    if hashtag_factor < 0.5 and hashtags is not None and len(hashtags) < 2:
        suggestions.append({
            "type": "hashtags",
            "suggestion": "Ajoutez 2-3 hashtags pertinents pour augmenter votre visibilité",
        })
    if media_factor == 0:
        suggestions.append({
            "type": "media",
            "suggestion": "Ajoutez une image ou une vidéo pour augmenter significativement l'engagement",
        })

    return {
        "overallScore": score,
        "platform": platform,
        "predictions": {key: int(score * factor) for key, factor in multipliers.items()},
        "factors": {
            "contentLength": length_factor * 100,
            "hashtags": hashtag_factor * 100,
            "media": media_factor * 100,
            "topics": topics_factor * 100,
        },
        "suggestedImprovements": suggestions,
    }


def detect_trends(text: str) -> Dict[str, Any]:
    lowered = text.lower()
    matched = []
    for name, keywords in CURRENT_TRENDS.items():
        hits = _match_keywords(lowered, keywords)
        if hits:
            matched.append(
                {"trend": name, "relevance": min(len(hits) / len(keywords) * 2, 1), "matchedKeywords": hits}
            )
    matched.sort(key=lambda trend: trend["relevance"], reverse=True)
    return {
        "matchedTrends": matched,
        "trendingTopicCount": len(matched),
        "topTrend": matched[0] if matched else None,
    }
