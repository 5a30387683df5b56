from .cli import cli
from . import cmd_destroy
from . import cmd_generate
from . import cmd_list
from . import cmd_print
from . import cmd_revoke
from . import cmd_sign
from . import cmd_verify
from . import cmd_version
