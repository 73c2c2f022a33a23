"""Prompt loading and rendering."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from logger import get_logger

logger = get_logger()


class PromptManager:
    """Loads prompt definitions from YAML files and renders them.

    A prompt file holds system_prompt, user_prompt_template (str.format
    placeholders), parameters (model, temperature, max_tokens) and version.
    """

    def __init__(self, prompts_dir: Optional[Path] = None):
        self.prompts_dir = prompts_dir or Path(__file__).parent
        self._cache: Dict[str, Dict[str, Any]] = {}

    def load_prompt(self, prompt_name: str) -> Dict[str, Any]:
        """Load a prompt definition, caching it for later calls.

        Raises:
            FileNotFoundError: If the prompt file doesn't exist.
            yaml.YAMLError: If the YAML is invalid.
        """
        if prompt_name not in self._cache:
            prompt_file = self.prompts_dir / f"{prompt_name}.yaml"
            if not prompt_file.exists():
                raise FileNotFoundError(f"Prompt file not found: {prompt_file}")

            logger.info(f"Loading prompt from {prompt_file}")
            with open(prompt_file, "r") as f:
                self._cache[prompt_name] = yaml.safe_load(f) or {}

        return self._cache[prompt_name]

    def render_prompt(
        self, prompt_name: str, variables: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Load a prompt and substitute variables into its user template.

        Returns:
            Dict with system_prompt, user_prompt, parameters and version.

        Raises:
            KeyError: If the template references a variable not supplied.
        """
        prompt_config = self.load_prompt(prompt_name)
        template = prompt_config.get("user_prompt_template", "")

        try:
            user_prompt = template.format(**variables)
        except KeyError as e:
            raise KeyError(f"Prompt '{prompt_name}' needs variable {e}") from None

        return {
            "system_prompt": prompt_config.get("system_prompt", ""),
            "user_prompt": user_prompt,
            "parameters": prompt_config.get("parameters", {}),
            "version": prompt_config.get("version", "unknown"),
        }
