#!/usr/bin/env python3
"""
AI Grammar & Assistant - Main Application Entry Point
A desktop chat companion that fixes common grammar slips, answers like a
voice assistant, and talks back with an animated avatar.

Features:
- Typed or spoken questions
- Simple grammar correction before every question
- Replies from an OpenAI-compatible chat completion endpoint
- Spoken replies synchronized with an avatar clip
- Live camera preview

Version: 1.0.0
Python: 3.11+
"""

import sys
import asyncio
import logging

REQUIRED_PACKAGES = {
    'tkinter': 'tkinter',
    'openai': 'openai',
    'pyttsx3': 'pyttsx3',
    'speech_recognition': 'SpeechRecognition',
    'cv2': 'opencv-python',
    'PIL': 'Pillow',
    'pydantic': 'pydantic',
    'yaml': 'PyYAML',
    'dotenv': 'python-dotenv',
}

def check_python_version():
    """Ensure compatible Python version."""
    if sys.version_info < (3, 11):
        print("❌ Python 3.11 or higher is required!")
        print(f"Current version: {sys.version}")
        sys.exit(1)

def check_dependencies():
    """Check if all required dependencies are installed."""
    missing_packages = []

    for module, package in REQUIRED_PACKAGES.items():
        try:
            __import__(module)
        except ImportError:
            missing_packages.append(package)

    if missing_packages:
        print("❌ Missing required packages:")
        for pkg in missing_packages:
            print(f"   - {pkg}")
        print("\nPlease install missing packages with:")
        print("pip install -e .")
        sys.exit(1)

def main():
    """Main application entry point."""
    check_python_version()
    check_dependencies()

    from avatar_chat.core.application import AssistantApplication
    from avatar_chat.core.config import load_config
    from avatar_chat.utils.logger import setup_logging

    try:
        config = load_config()
    except Exception as e:
        print(f"❌ Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(config.log_level, str(config.log_dir), console_level="DEBUG" if config.debug else None)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting {config.app_name} {config.version}")

    try:
        app = AssistantApplication(config)
        asyncio.run(app.run())

    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        print("\n👋 Goodbye!")
    except Exception as e:
        logger.error(f"Application error: {e}", exc_info=True)
        print(f"❌ Application error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
