from .restore_script_generator import RestoreScriptGenerator, ps_literal

__all__ = ["RestoreScriptGenerator", "ps_literal"]
