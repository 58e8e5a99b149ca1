"""
AI coaching copy using Ollama (local) or the Claude API.

Produces short motivational messages and form cues for young athletes. The
copy is optional: any backend failure is logged and a fixed fallback text is
returned, so training recommendations never depend on it.
"""

import logging
from typing import Dict, List, Optional, Sequence

import anthropic
import requests

from .config import config
from .errors import CoachUnavailableError

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Keep pushing forward! You're doing great!"
FALLBACK_FORM_CUES = ["Keep good form", "Breathe properly", "Control the movement"]
MAX_FORM_CUES = 5


class AICoach:
    """Coaching copy generator backed by Ollama or Claude."""

    def __init__(self,
                 backend: Optional[str] = None,
                 model: Optional[str] = None,
                 api_key: Optional[str] = None,
                 timeout: Optional[float] = None):
        """
        Initialize the coach.

        Args:
            backend: "ollama" or "claude"; defaults to COACH_BACKEND
            model: Model name; defaults to OLLAMA_MODEL or ANTHROPIC_MODEL
            api_key: Anthropic API key (claude backend only)
            timeout: Request timeout in seconds

        Raises:
            CoachUnavailableError: backend disabled, not running or not configured
        """
        self.backend = (backend or config.COACH_BACKEND).lower()
        self.timeout = timeout or config.COACH_TIMEOUT_SECONDS

        if self.backend == "ollama":
            self.base_url = config.OLLAMA_URL.rstrip('/')
            self.model = model or config.OLLAMA_MODEL
            # Check if Ollama is running
            try:
                response = requests.get(f"{self.base_url}/api/tags", timeout=2)
            except requests.exceptions.RequestException as e:
                raise CoachUnavailableError(
                    f"Ollama is not running at {self.base_url}. Start it with: ollama serve"
                ) from e
            if response.status_code != 200:
                raise CoachUnavailableError(f"Ollama returned status {response.status_code}")

        elif self.backend == "claude":
            self.api_key = api_key or config.ANTHROPIC_API_KEY
            if not self.api_key:
                raise CoachUnavailableError(
                    "Anthropic API key not found. Set ANTHROPIC_API_KEY or pass api_key."
                )
            self.model = model or config.ANTHROPIC_MODEL
            if not self.model.startswith('claude'):
                self.model = config.ANTHROPIC_MODEL
            self.client = anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout)

        else:
            raise CoachUnavailableError(f"Coaching backend is disabled (COACH_BACKEND={self.backend})")

    def motivational_message(self, context: Dict) -> str:
        """One or two encouraging sentences for today's training."""
        system_prompt = (
            "You are a motivational youth sports coach. "
            "Write encouraging, age-appropriate messages for teenage athletes."
        )
        user_prompt = f"""Generate a personalized motivational message for a teenage athlete based on:

{self._format_context(context)}

Make it:
- Age-appropriate for teens
- Encouraging but not overwhelming
- Specific to their current training
- 1-2 sentences max
- Positive and motivating tone"""

        try:
            text = self._generate(system_prompt, user_prompt, temperature=0.8, max_tokens=100)
        except Exception as e:
            logger.warning(f"Error generating motivational message: {e}")
            return FALLBACK_MESSAGE

        return text.strip() or FALLBACK_MESSAGE

    def form_cues(self, exercise_id: str, common_mistakes: Sequence[str] = ()) -> List[str]:
        """Three to five short form cues for an exercise."""
        exercise_name = exercise_id.replace('_', ' ')
        system_prompt = (
            "You are an expert strength and conditioning coach. "
            "Provide clear, concise form cues for exercises."
        )
        user_prompt = f"""Generate 3-5 key form cues for the exercise: {exercise_name}

Common mistakes to address: {', '.join(common_mistakes) or 'none reported'}

Provide cues that are:
- Clear and concise (1-3 words each)
- Easy to remember during exercise
- Focus on safety and effectiveness
- Age-appropriate for teens

Format as a simple list, one cue per line."""

        try:
            text = self._generate(system_prompt, user_prompt, temperature=0.6, max_tokens=200)
        except Exception as e:
            logger.warning(f"Error generating form cues for {exercise_id}: {e}")
            return list(FALLBACK_FORM_CUES)

        cues = [line.strip().lstrip('-*• ').strip() for line in text.split('\n')]
        cues = [cue for cue in cues if cue]
        return cues[:MAX_FORM_CUES] or list(FALLBACK_FORM_CUES)

    def _generate(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        if self.backend == "ollama":
            return self._get_ollama_response(system_prompt, user_prompt, temperature, max_tokens)
        return self._get_claude_response(system_prompt, user_prompt, temperature, max_tokens)

    def _get_ollama_response(self, system_prompt: str, user_prompt: str,
                             temperature: float, max_tokens: int) -> str:
        """Get response from local Ollama."""
        # Ollama's generate endpoint takes a single prompt
        full_prompt = f"{system_prompt}\n\n{user_prompt}"

        response = requests.post(
            f"{self.base_url}/api/generate",
            json={
                'model': self.model,
                'prompt': full_prompt,
                'stream': False,
                'options': {
                    'temperature': temperature,
                    'num_predict': max_tokens,
                },
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()['response']

    def _get_claude_response(self, system_prompt: str, user_prompt: str,
                             temperature: float, max_tokens: int) -> str:
        """Get response from Claude API."""
        message = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        return message.content[0].text

    def _format_context(self, context: Dict) -> str:
        """Format training context into readable text for the model."""
        lines = [
            f"- Program week: {context.get('week', 'N/A')} (day {context.get('day', 'N/A')})",
            f"- Phase: {context.get('phase', 'N/A')} - {context.get('focus', '')}",
        ]

        sessions = context.get('sessions') or []
        lines.append(f"- Today's sessions: {', '.join(sessions) if sessions else 'Rest day'}")

        progress = context.get('progress_pct')
        if progress is not None:
            lines.append(f"- Program progress: {progress:.0f}%")

        if context.get('missed_sessions'):
            lines.append(f"- Missed sessions: {context['missed_sessions']}")

        challenges = context.get('current_challenges') or []
        if challenges:
            lines.append(f"- Current challenges: {', '.join(challenges)}")

        return "\n".join(lines)
