"""Imagine Bot - chat bot with slash commands and AI image generation."""
