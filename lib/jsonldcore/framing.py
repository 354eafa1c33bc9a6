"""
The JSON-LD framing algorithm.

Framing works on a node map of the expanded input. Each frame level selects
the nodes that match it and copies them into the output, embedding the
nodes they reference according to the frame's flags.

.. module:: jsonldcore.framing
  :synopsis: JSON-LD framing
"""

import copy

from jsonldcore.errors import FrameError
from jsonldcore.model import (
    add_value, arrayify, get_values,
    _is_array, _is_empty_object, _is_keyword, _is_list, _is_object,
    _is_subject, _is_subject_reference, _is_value)
from jsonldcore.namer import UniqueNamer
from jsonldcore.node_map import create_node_map, merge_node_map_graphs

__all__ = ['Framer', 'EMBED_VALUES', 'get_embed_flag']

EMBED_VALUES = ('@always', '@once', '@never')


def get_embed_flag(value):
    """
    Normalizes an @embed value. True means '@once' and False means
    '@never'.

    :raises FrameError: for any other non-keyword value.
    """
    if value is True:
        return '@once'
    if value is False:
        return '@never'
    if value not in EMBED_VALUES:
        raise FrameError(
            'Invalid JSON-LD syntax; invalid value of @embed.',
            details={'embed': value}, code='invalid @embed value')
    return value


class Framer(object):
    """
    Frames expanded input with an expanded frame.

    Options (frame-level flags override them):
      [embed] default @embed flag: '@always', '@once' or '@never'
        (default: '@once').
      [explicit] default @explicit flag (default: False).
      [requireAll] default @requireAll flag (default: True).
      [omitDefault] default @omitDefault flag (default: False).
      [pruneBlankNodeIdentifiers] True to collect blank node identifiers
        used only once in ``bnodes_to_clear`` (default: True).
    """

    def __init__(self, options=None):
        options = options or {}
        self.options = {
            'embed': get_embed_flag(options.get('embed', '@once')),
            'explicit': options.get('explicit', False),
            'requireAll': options.get('requireAll', True),
            'omitDefault': options.get('omitDefault', False)
        }
        self.prune_blank_node_identifiers = options.get(
            'pruneBlankNodeIdentifiers', True)
        self.bnodes_to_clear = []

    def frame(self, input_, frame, merged=True, namer=None):
        """
        Performs JSON-LD framing.

        :param input_: the expanded JSON-LD to frame.
        :param frame: the expanded JSON-LD frame to use.
        :param merged: True to frame the merge of all graphs, False to frame
          the default graph only.
        :param namer: the UniqueNamer for blank nodes, a fresh '_:b' namer if
          not given.

        :return: the framed output (expanded).
        """
        state = {
            'graph': '@default',
            'graphMap': {'@default': {}},
            'graphStack': [],
            'subjectStack': [],
            'uniqueEmbeds': {},
            'bnodeMap': {}
        }

        if namer is None:
            namer = UniqueNamer('_:b')
        create_node_map(input_, state['graphMap'], '@default', namer)
        if merged:
            state['graphMap']['@merged'] = merge_node_map_graphs(
                state['graphMap'])
            state['graph'] = '@merged'
        state['subjects'] = state['graphMap'][state['graph']]

        framed = []
        self._match_frame(
            state, list(state['subjects'].keys()), frame, framed, None)

        if self.prune_blank_node_identifiers:
            self.bnodes_to_clear.extend(
                id_ for id_, outputs in state['bnodeMap'].items()
                if len(outputs) == 1)
        return framed

    def _match_frame(self, state, subjects, frame, parent, property):
        """
        Frames subjects according to the given frame.

        :param state: the current framing state.
        :param subjects: the ids of the subjects to filter.
        :param frame: the frame (a single-element list).
        :param parent: the parent subject or top-level array.
        :param property: the parent property, initialized to None.
        """
        _validate_frame(frame)
        frame = frame[0]

        flags = {
            'embed': self._get_frame_flag(frame, 'embed'),
            'explicit': self._get_frame_flag(frame, 'explicit'),
            'requireAll': self._get_frame_flag(frame, 'requireAll')
        }

        matches = self._filter_subjects(state, subjects, frame, flags)

        for id_, subject in matches.items():
            # each top-level match is a compartmentalized result
            if property is None:
                state['uniqueEmbeds'] = {state['graph']: set()}
            else:
                state['uniqueEmbeds'].setdefault(state['graph'], set())
            embedded = state['uniqueEmbeds'][state['graph']]

            output = {'@id': id_}
            if id_.startswith('_:'):
                add_value(
                    state['bnodeMap'], id_, output, property_is_array=True)

            if (flags['embed'] == '@never' or
                    self._creates_circular_reference(
                        subject, state['graph'], state['subjectStack']) or
                    (flags['embed'] == '@once' and id_ in embedded)):
                _add_frame_output(parent, property, output)
                continue

            if flags['embed'] == '@once':
                embedded.add(id_)

            state['subjectStack'].append(
                {'subject': subject, 'graph': state['graph']})

            # subject is also the name of a graph
            if id_ in state['graphMap']:
                recurse = False
                if '@graph' not in frame:
                    recurse = state['graph'] != '@merged'
                    subframe = {}
                else:
                    subframe = frame['@graph'][0]
                    if not _is_object(subframe):
                        subframe = {}
                    recurse = id_ not in ('@merged', '@default')

                if recurse:
                    state['graphStack'].append(state['graph'])
                    state['graph'] = id_
                    self._match_frame(
                        state, list(state['graphMap'][id_].keys()),
                        [subframe], output, '@graph')
                    state['graph'] = state['graphStack'].pop()

            for prop in subject:
                if _is_keyword(prop):
                    output[prop] = copy.deepcopy(subject[prop])
                    if prop == '@type':
                        for type_ in subject['@type']:
                            if type_.startswith('_:'):
                                add_value(
                                    state['bnodeMap'], type_, output,
                                    property_is_array=True)

            # explicit frames emit their properties in frame order
            if flags['explicit']:
                props = [p for p in frame
                         if not _is_keyword(p) and p in subject]
            else:
                props = [p for p in subject if not _is_keyword(p)]

            for prop in props:
                self._frame_property(
                    state, frame, flags, output, prop, subject[prop])

            self._add_defaults(frame, output)

            if '@reverse' in frame:
                self._frame_reverse(state, frame, id_, output, property)

            _add_frame_output(parent, property, output)

            state['subjectStack'].pop()

    def _frame_property(self, state, frame, flags, output, prop, objects):
        if prop in frame:
            subframe = frame[prop]
        else:
            subframe = _create_implicit_frame(flags)

        for o in objects:
            if _is_list(o):
                list_ = {'@list': []}
                _add_frame_output(output, prop, list_)

                if prop in frame and frame[prop] and _is_list(frame[prop][0]):
                    list_frame = frame[prop][0]['@list']
                else:
                    list_frame = _create_implicit_frame(flags)
                if not list_frame:
                    list_frame = _create_implicit_frame(flags)

                for item in o['@list']:
                    if _is_subject_reference(item):
                        self._match_frame(
                            state, [item['@id']], list_frame, list_, '@list')
                    else:
                        _add_frame_output(list_, '@list', copy.deepcopy(item))
                continue

            if _is_subject_reference(o):
                self._match_frame(state, [o['@id']], subframe, output, prop)
            elif _value_match(subframe[0] if subframe else {}, o):
                _add_frame_output(output, prop, copy.deepcopy(o))

    def _add_defaults(self, frame, output):
        for prop in frame:
            if _is_keyword(prop):
                continue
            next_ = frame[prop][0] if frame[prop] else {}
            if not _is_object(next_):
                next_ = {}
            omit_default = self._get_frame_flag(next_, 'omitDefault')
            if not omit_default and prop not in output:
                preserve = '@null'
                if '@default' in next_:
                    preserve = copy.deepcopy(next_['@default'])
                output[prop] = [{'@preserve': arrayify(preserve)}]

    def _frame_reverse(self, state, frame, id_, output, property):
        for reverse_prop, subframe in frame['@reverse'].items():
            for subject_id, subject in state['subjects'].items():
                node_values = get_values(subject, reverse_prop)
                if any(_is_object(v) and v.get('@id') == id_
                       for v in node_values):
                    reverse = output.setdefault('@reverse', {})
                    add_value(
                        reverse, reverse_prop, [], property_is_array=True)
                    self._match_frame(
                        state, [subject_id], subframe,
                        reverse[reverse_prop], property)

    def _get_frame_flag(self, frame, name):
        """
        Gets the frame flag value for the given flag name.

        :param frame: the frame.
        :param name: the flag name.

        :return: the flag value.
        """
        rval = frame.get('@' + name, [self.options[name]])
        if _is_array(rval):
            rval = rval[0] if rval else self.options[name]
        if name == 'embed':
            rval = get_embed_flag(rval)
        return rval

    def _creates_circular_reference(self, subject_to_embed, graph,
                                    subject_stack):
        """
        Returns True if the subject is already being embedded further up the
        current path.
        """
        for subject in reversed(subject_stack):
            if (subject['graph'] == graph and
                    subject['subject']['@id'] == subject_to_embed['@id']):
                return True
        return False

    def _filter_subjects(self, state, subjects, frame, flags):
        """
        Returns the subjects that match a frame, in the given order.
        """
        rval = {}
        graph = state['graphMap'][state['graph']]
        for id_ in subjects:
            subject = graph.get(id_)
            if subject is not None and self._filter_subject(
                    state, subject, frame, flags):
                rval[id_] = subject
        return rval

    def _filter_subject(self, state, subject, frame, flags):
        """
        Returns True if the given subject matches the given frame.

        A frame with specific types matches nodes that have every one of
        those types. An empty @type list matches nodes without a type and a
        wildcard ({}) matches nodes with any type. Otherwise the node must
        have the frame's properties (all of them with @requireAll, at least
        one without).

        :param state: the current framing state.
        :param subject: the subject to check.
        :param frame: the frame to check.
        :param flags: the frame flags.

        :return: True if the subject matches, False if not.
        """
        wildcard = True
        matches_some = False
        for k, v in frame.items():
            match_this = False
            node_values = get_values(subject, k)
            is_empty = len(v) == 0 if _is_array(v) else False

            if _is_keyword(k):
                if k not in ('@id', '@type'):
                    continue

                if k == '@id':
                    ids = arrayify(v)
                    if ids and not _is_empty_object(ids[0]):
                        return bool(node_values) and node_values[0] in ids
                    continue

                types = arrayify(v)
                if is_empty:
                    if node_values:
                        return False
                    match_this = True
                elif _is_empty_object(types[0]):
                    match_this = len(node_values) > 0
                else:
                    return all(t in node_values for t in types)

            this_frame = get_values(frame, k)
            this_frame = this_frame[0] if this_frame else None
            has_default = False
            if this_frame is not None and not _is_keyword(k):
                _validate_frame([this_frame])
                has_default = '@default' in this_frame

            if not _is_keyword(k):
                wildcard = False

                # a missing property with a default still matches
                if not node_values and has_default:
                    continue

                if node_values and is_empty:
                    return False

                if this_frame is None:
                    if node_values:
                        return False
                    match_this = True
                elif _is_value(this_frame):
                    match_this = any(
                        _value_match(this_frame, nv) for nv in node_values)
                elif _is_list(this_frame):
                    list_value = (this_frame['@list'][0]
                                  if this_frame['@list'] else None)
                    if node_values and _is_list(node_values[0]):
                        node_list_values = node_values[0]['@list']
                        if _is_value(list_value):
                            match_this = any(
                                _value_match(list_value, lv)
                                for lv in node_list_values)
                        elif (_is_subject(list_value) or
                                _is_subject_reference(list_value)):
                            match_this = any(
                                self._node_match(state, list_value, lv, flags)
                                for lv in node_list_values)
                        else:
                            match_this = True
                else:
                    match_this = len(node_values) > 0

            if not match_this and flags['requireAll']:
                return False

            matches_some = matches_some or match_this

        return wildcard or matches_some

    def _node_match(self, state, pattern, value, flags):
        """
        Node matches if it is a node, and matches the pattern as a frame.
        """
        if not _is_object(value) or '@id' not in value:
            return False
        node_object = state['subjects'].get(value['@id'])
        return bool(node_object) and self._filter_subject(
            state, node_object, pattern, flags)


def _validate_frame(frame):
    if (not _is_array(frame) or len(frame) != 1 or
            not _is_object(frame[0])):
        raise FrameError(
            'Invalid JSON-LD syntax; a JSON-LD frame must be a single '
            'object.', details={'frame': frame}, code='invalid frame')


def _create_implicit_frame(flags):
    """
    Creates a wildcard child frame that uses the same flags as its parent.
    """
    return [{'@' + key: [value] for key, value in flags.items()}]


def _add_frame_output(parent, property, output):
    if _is_object(parent):
        add_value(parent, property, output, property_is_array=True)
    else:
        parent.append(output)


def _value_match(pattern, value):
    """
    Value matches if it is a value and matches the value pattern

    - `pattern` is empty
    - @values are the same, or `pattern[@value]` is a wildcard,
    - @types are the same or `value[@type]` is not None
      and `pattern[@type]` is `{}` or `value[@type]` is None
      and `pattern[@type]` is None or `[]`, and
    - @languages are the same or `value[@language]` is not None
      and `pattern[@language]` is `{}`, or `value[@language]` is None
      and `pattern[@language]` is None or `[]`

    :param pattern: used to match value.
    :param value: to check.
    """
    if not _is_value(value):
        return not pattern or not _is_value(pattern)

    v1, t1, l1 = (
        value.get('@value'), value.get('@type'), value.get('@language'))
    v2 = get_values(pattern, '@value')
    t2 = get_values(pattern, '@type')
    l2 = get_values(pattern, '@language')

    if not v2 and not t2 and not l2:
        return True
    if v2 and not (v1 in v2 or _is_empty_object(v2[0])):
        return False
    if not ((not t1 and not t2) or (t1 in t2) or
            (t1 and t2 and _is_empty_object(t2[0]))):
        return False
    if not ((not l1 and not l2) or (l1 in l2) or
            (l1 and l2 and _is_empty_object(l2[0]))):
        return False
    return True
