# mediminder/services/journal_service.py
from collections import Counter
from typing import Sequence

from mediminder.models.journal import JournalAnalysis, JournalInsight
from mediminder.services.ai_provider import AIProviderError, ai_provider
from mediminder.services.prompt_library import PROMPT_LIBRARY
from mediminder.utils.logger import logger

MIN_ENTRIES_FOR_PATTERNS = 2
MIN_PATTERN_OCCURRENCES = 2


class JournalService:
    async def analyze_entry(self, text: str) -> JournalAnalysis:
        """
        Extracts symptoms, medication, severity and time-after-dose from an entry.
        Provider failures degrade to an empty analysis so the entry can still be saved.
        """
        try:
            analysis = await ai_provider.complete_structured(
                PROMPT_LIBRARY["Journal Analyzer"], {"text": text}, JournalAnalysis
            )
        except AIProviderError as e:
            logger.warning(f"Journal analysis unavailable, saving without it: {e}")
            return JournalAnalysis()
        logger.debug(f"Journal analysis: {analysis.model_dump()}")
        return analysis

    def generate_insights(self, entries: Sequence) -> JournalInsight:
        """Looks for a medication whose reported symptom set keeps coming back."""
        if len(entries) < MIN_ENTRIES_FOR_PATTERNS:
            return JournalInsight(
                pattern="Keep adding entries to get personalized insights about your symptoms and medications.",
                explanation="The more data you provide, the better we can identify patterns and correlations.",
                recommendations=[
                    "Add entries after each medication dose",
                    "Be specific about timing and symptoms",
                    "Include any relevant context",
                ],
            )

        combinations = Counter(
            (entry.medication, tuple(entry.symptoms))
            for entry in entries
            if entry.symptoms and entry.medication
        )
        # most_common keeps first-seen order among ties
        most_common = combinations.most_common(1)

        if most_common and most_common[0][1] >= MIN_PATTERN_OCCURRENCES:
            (medication, symptoms), count = most_common[0]
            return JournalInsight(
                pattern=f"You've reported {', '.join(symptoms)} {count} times after taking {medication}.",
                explanation=(
                    f"This could indicate a side effect of {medication}. Side effects often occur "
                    "within a specific timeframe after taking medication."
                ),
                recommendations=[
                    f"Consider taking {medication} with food if possible",
                    "Discuss these symptoms with your healthcare provider",
                    "Monitor if the symptoms improve or worsen over time",
                ],
            )

        return JournalInsight(
            pattern="We're starting to collect data about your symptoms and medications.",
            explanation="As you add more entries, we'll be able to identify patterns and provide more specific insights.",
            recommendations=[
                "Continue logging your symptoms after each medication dose",
                "Be consistent with your entries",
                "Include timing information when possible",
            ],
        )


journal_service = JournalService()
