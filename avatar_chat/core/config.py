"""
Configuration management for AI Grammar & Assistant.
Handles loading and validation of application settings.
"""

import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant. Correct grammar only when needed, "
    "but always answer like Google Assistant."
)
DEFAULT_FALLBACK_REPLY = "Sorry, I couldn't connect to AI right now."

class AIConfig(BaseModel):
    """Completion endpoint configuration."""
    openai_api_key: Optional[str] = None
    api_base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-3.5-turbo"
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    fallback_reply: str = DEFAULT_FALLBACK_REPLY

class VoiceConfig(BaseModel):
    """Voice synthesis and recognition configuration."""
    language: str = "en-US"

    tts_rate: int = 200
    tts_volume: float = 0.9
    tts_voice: str = "default"

    # Single-shot recognition
    listen_timeout: Optional[float] = 5.0
    phrase_time_limit: Optional[float] = 15.0
    ambient_adjust_seconds: float = 0.5

class VideoConfig(BaseModel):
    """Avatar clip and camera preview configuration."""
    avatar_path: str = "assets/avatar.mp4"
    avatar_loop: bool = True
    camera_index: int = 0
    frame_width: int = 300
    frame_height: int = 300
    frame_interval: float = 1 / 30

class GUIConfig(BaseModel):
    """Window configuration."""
    window_title: str = "🤖 AI Grammar & Assistant"
    subtitle: str = "Chat, correct grammar & talk with your AI friend!"
    placeholder: str = "Ask me anything..."
    width: int = 720
    height: int = 640

class Config(BaseModel):
    """Main application configuration."""
    app_name: str = "AI Grammar & Assistant"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    # Component configurations
    ai: AIConfig = Field(default_factory=AIConfig)
    voice: VoiceConfig = Field(default_factory=VoiceConfig)
    video: VideoConfig = Field(default_factory=VideoConfig)
    gui: GUIConfig = Field(default_factory=GUIConfig)

def load_config(config_file: Optional[str] = None) -> Config:
    """Load configuration from file or environment variables."""

    # Default config file path
    if config_file is None:
        config_file = "configs/config.yaml"

    config_path = Path(config_file)

    # Load from YAML if exists
    config_data = {}
    if config_path.exists() and config_path.suffix in ['.yaml', '.yml']:
        import yaml
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

    # Override with environment variables
    env_overrides = {}

    if os.getenv('OPENAI_API_KEY'):
        env_overrides.setdefault('ai', {})['openai_api_key'] = os.getenv('OPENAI_API_KEY')
    if os.getenv('OPENAI_BASE_URL'):
        env_overrides.setdefault('ai', {})['api_base_url'] = os.getenv('OPENAI_BASE_URL')
    if os.getenv('OPENAI_MODEL'):
        env_overrides.setdefault('ai', {})['model'] = os.getenv('OPENAI_MODEL')

    if os.getenv('AVATAR_VIDEO_PATH'):
        env_overrides.setdefault('video', {})['avatar_path'] = os.getenv('AVATAR_VIDEO_PATH')
    if os.getenv('CAMERA_INDEX'):
        env_overrides.setdefault('video', {})['camera_index'] = int(os.getenv('CAMERA_INDEX'))

    if os.getenv('LOG_LEVEL'):
        env_overrides['log_level'] = os.getenv('LOG_LEVEL')

    # Merge configurations
    def deep_merge(base: dict, override: dict) -> dict:
        """Deep merge two dictionaries."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                base[key] = deep_merge(base[key], value)
            else:
                base[key] = value
        return base

    final_config = deep_merge(config_data, env_overrides)

    return Config(**final_config)

def save_config(config: Config, config_file: str = "configs/config.yaml"):
    """Save configuration to YAML file."""
    import yaml

    config_path = Path(config_file)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # Secrets stay in the environment
    config_dict = config.model_dump(mode="json", exclude={"ai": {"openai_api_key"}})

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump(config_dict, f, default_flow_style=False, indent=2, allow_unicode=True)
