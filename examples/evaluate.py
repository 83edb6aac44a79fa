""" Evaluate each command line argument in a running nREPL server, and
    print the result. The server port is taken from $NREPL_PORT or the
    .nrepl-port file in the current directory (or any parent).

    python evaluate.py '(+ 40 2)' '(println "hello")'
"""

import logging
import sys

import nrepl


def main():

    logging.basicConfig(level=logging.INFO)

    nrepl.connect()

    for code in sys.argv[1:]:
        try:
            result = nrepl.evaluate(code)
        except nrepl.EvalError as e:
            print('error: ' + e.text, file=sys.stderr)
        else:
            print(result)

    print(nrepl.begin.status())


if __name__ == '__main__':
    main()

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
