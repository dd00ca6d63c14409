from prompts.manager import get_prompt_template, force_reload_prompts, list_prompt_keys
