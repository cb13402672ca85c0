"""
Command line configuration.

Rather than a configuration object passed around, the module itself is the
singleton namespace: the CLI stores its parser and parsed arguments here and
any module can import it to look at them.

"""

def reset():
    """
    Restore the namespace to pristine condition.
    """
    # pylint: disable=W0603
    global args, parser
    args = None
    parser = None

# These assignments are used instead of calling reset()
# purely to shut pylint up.
args = None
parser = None
