"""
jsonld-core - command line front end for the JSON-LD processor.

Examples::

    jsonld-core --expand doc.jsonld
    jsonld-core --compact context.jsonld doc.jsonld
    jsonld-core --to-rdf --format text/turtle doc.jsonld
    jsonld-core --from-rdf --output-form compacted data.nq

.. module:: jsonldcore.cli
  :synopsis: jsonld-core command line interface
"""

import argparse
import json
import logging
import os
import sys

from jsonldcore import jsonld
from jsonldcore.errors import JsonLdError
from jsonldcore.formats import NQUADS

log = logging.getLogger(__name__)


def _read_text(path):
    if path == '-':
        return sys.stdin.read()
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def load_json_arg(value):
    """
    Loads a document, context or frame argument: a file ('-' for stdin), an
    inline JSON value, or otherwise a URL left for the document loader.
    """
    if value == '-' or os.path.exists(value):
        return json.loads(_read_text(value))
    if value.lstrip().startswith(('{', '[')):
        return json.loads(value)
    return value


def run(opts):
    """
    Runs the selected action.

    :param opts: the parsed arguments.

    :return: the result, a JSON value or RDF text.
    """
    options = {}
    if opts.base is not None:
        options['base'] = opts.base

    if opts.from_rdf:
        options['useRdfType'] = opts.useRdfType
        options['useNativeTypes'] = opts.useNativeTypes
        options['outputForm'] = opts.output_form
        options['format'] = opts.format or NQUADS
        return jsonld.from_rdf(_read_text(opts.input), options)

    input_ = load_json_arg(opts.input)

    if opts.compact is not None:
        return jsonld.compact(input_, load_json_arg(opts.compact), options)
    if opts.flatten:
        return jsonld.flatten(input_, None, options)
    if opts.frame is not None:
        return jsonld.frame(input_, load_json_arg(opts.frame), options)
    if opts.normalize:
        options['format'] = opts.format or NQUADS
        return jsonld.normalize(input_, options)
    if opts.to_rdf:
        options['format'] = opts.format or NQUADS
        return jsonld.to_rdf(input_, options)
    return jsonld.expand(input_, options)


def build_parser():
    prs = argparse.ArgumentParser(
        prog='jsonld-core',
        description='Process JSON-LD documents.')

    prs.add_argument('input',
                     help='JSON-LD (or RDF with --from-rdf) file, URL, '
                          'or - for stdin')

    actions = prs.add_mutually_exclusive_group()
    actions.add_argument('--expand',
                         help='ACTION: Perform JSON-LD expansion (default)',
                         dest='expand',
                         action='store_true')
    actions.add_argument('--compact',
                         help=('ACTION: Compact the document with the given '
                               '@context file or URI'),
                         dest='compact',
                         metavar='CTX',
                         action='store')
    actions.add_argument('--flatten',
                         help='ACTION: Perform JSON-LD flattening',
                         dest='flatten',
                         action='store_true')
    actions.add_argument('--frame',
                         help='ACTION: Frame the document with the given '
                              'frame file or URI',
                         dest='frame',
                         metavar='FRAME',
                         action='store')
    actions.add_argument('--normalize',
                         help='ACTION: Perform RDF dataset normalization',
                         dest='normalize',
                         action='store_true')
    actions.add_argument('--to-rdf',
                         help='ACTION: Convert JSON-LD to RDF',
                         dest='to_rdf',
                         action='store_true')
    actions.add_argument('--from-rdf',
                         help='ACTION: Convert an RDF dataset to JSON-LD',
                         dest='from_rdf',
                         action='store_true')

    prs.add_argument('--format',
                     help='RDF format [default: application/n-quads]',
                     dest='format',
                     action='store')
    prs.add_argument('--base',
                     help='Base IRI to use',
                     dest='base',
                     action='store')
    prs.add_argument('--indent',
                     help='Indent json with n spaces [default: 2]',
                     dest='indent',
                     action='store',
                     type=int,
                     default=2)
    prs.add_argument('--output-form',
                     help='--from-rdf output form [default: expanded]',
                     dest='output_form',
                     choices=jsonld.OUTPUT_FORMS,
                     default='expanded')
    prs.add_argument('--rdf-type',
                     help='Use rdf:type instead of @type',
                     dest='useRdfType',
                     action='store_true')
    prs.add_argument('--no-native-types',
                     help='Keep XSD typed literals as typed values',
                     dest='useNativeTypes',
                     action='store_false')

    prs.add_argument('-v', '--verbose',
                     dest='verbose',
                     action='store_true',)
    prs.add_argument('-q', '--quiet',
                     dest='quiet',
                     action='store_true',)
    return prs


def main(argv=None):
    opts = build_parser().parse_args(args=argv)

    if not opts.quiet:
        logging.basicConfig()

        if opts.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

    try:
        output = run(opts)
    except JsonLdError as e:
        log.error('%s', e)
        return 1
    except (OSError, ValueError) as e:
        log.error('Could not read input: %s', e)
        return 1

    if isinstance(output, str):
        sys.stdout.write(output)
    else:
        sys.stdout.write(json.dumps(output, indent=opts.indent) + '\n')
    return 0


if __name__ == '__main__':
    sys.exit(main())
