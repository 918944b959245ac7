# Gym software integrations (one subpackage per platform)
