from loguru import logger

# Disable logging by default for library usage.
# Application entry points (e.g., ai_agents_skills.cli) should call
# logger.enable("ai_agents_skills") to enable logging.
logger.disable("ai_agents_skills")
