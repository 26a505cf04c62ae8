from ._cmds import CMDS, CMDSResult, cmdscale, double_center, eigendecompose, embed

__all__ = ['CMDS', 'CMDSResult', 'cmdscale', 'double_center', 'eigendecompose', 'embed']
