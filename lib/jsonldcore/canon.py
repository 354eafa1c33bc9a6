"""
RDF dataset normalization: canonical blank node labeling.

Two algorithms are provided, URDNA2015 (the default) and the older
URGNA2012. Both relabel every blank node to ``_:c14n<n>`` so that datasets
which differ only in blank node labels or quad order normalize to the same
N-Quads.

.. module:: jsonldcore.canon
  :synopsis: URDNA2015 and URGNA2012 dataset normalization
"""

import copy
import hashlib
import itertools
import logging

from jsonldcore.errors import NormalizeError
from jsonldcore.namer import UniqueNamer
from jsonldcore.nquads import serialize_nquad

__all__ = ['URDNA2015', 'URGNA2012', 'ALGORITHMS', 'DEFAULT_MAX_PERMUTATIONS']

logger = logging.getLogger(__name__)

# upper bound on the blank node permutations tried while hashing
DEFAULT_MAX_PERMUTATIONS = 10000


class URDNA2015(object):
    """
    URDNA2015 implements the URDNA2015 RDF Dataset Normalization Algorithm.
    """

    def __init__(self, max_permutations=DEFAULT_MAX_PERMUTATIONS):
        """
        :param max_permutations: the number of blank node permutations the
          Hash N-Degree Quads step may try before giving up, None for no
          limit.
        """
        self.max_permutations = max_permutations
        self.permutation_count = 0
        self.blank_node_info = {}
        self.hash_to_blank_nodes = {}
        self.canonical_namer = UniqueNamer('_:c14n')
        self.quads = []
        self.POSITIONS = {'subject': 's', 'object': 'o', 'name': 'g'}

    def main(self, dataset):
        """
        Normalizes an RDF dataset. The dataset is not modified.

        :param dataset: the RDF dataset (graph name to triples).

        :return: the canonical N-Quads, one sorted line per quad.
        """
        for graph_name, triples in dataset.items():
            for triple in triples:
                quad = copy.deepcopy(triple)
                if graph_name != '@default':
                    quad['name'] = {
                        'type': ('blank node' if graph_name.startswith('_:')
                                 else 'IRI'),
                        'value': graph_name
                    }
                self.quads.append(quad)

                for key, component in quad.items():
                    if key == 'predicate' or component['type'] != 'blank node':
                        continue
                    self.blank_node_info.setdefault(
                        component['value'], {'quads': []})['quads'].append(
                            quad)

        logger.debug(
            'Normalizing %d quads with %d blank nodes',
            len(self.quads), len(self.blank_node_info))

        non_normalized = set(self.blank_node_info.keys())

        # issue canonical labels for blank nodes with unique first degree
        # hashes until no more can be issued
        simple = True
        while simple:
            simple = False
            self.hash_to_blank_nodes = {}
            for id_ in non_normalized:
                hash_ = self.hash_first_degree_quads(id_)
                self.hash_to_blank_nodes.setdefault(hash_, []).append(id_)

            for hash_, id_list in sorted(self.hash_to_blank_nodes.items()):
                if len(id_list) > 1:
                    continue
                id_ = id_list[0]
                self.canonical_namer.get_name(id_)
                non_normalized.remove(id_)
                del self.hash_to_blank_nodes[hash_]
                simple = True

        # the remaining blank nodes share their first degree hash
        for hash_, id_list in sorted(self.hash_to_blank_nodes.items()):
            hash_path_list = []
            for id_ in id_list:
                if self.canonical_namer.is_named(id_):
                    continue
                namer = UniqueNamer('_:b')
                namer.get_name(id_)
                hash_path_list.append(self.hash_n_degree_quads(id_, namer))

            for result in sorted(hash_path_list, key=lambda r: r['hash']):
                for existing in result['namer'].order:
                    self.canonical_namer.get_name(existing)

        if self.permutation_count:
            logger.debug(
                'Normalization tried %d blank node permutations',
                self.permutation_count)

        normalized = []
        for quad in self.quads:
            for key, component in quad.items():
                if key != 'predicate' and component['type'] == 'blank node':
                    component['value'] = self.canonical_namer.get_name(
                        component['value'])
            normalized.append(serialize_nquad(quad))

        normalized.sort()
        return ''.join(normalized)

    def hash_first_degree_quads(self, id_):
        """
        Hashes the quads a blank node appears in, with its own label
        replaced by '_:a' and every other blank node label by '_:z'.
        """
        info = self.blank_node_info[id_]
        if 'hash' in info:
            return info['hash']

        nquads = []
        for quad in info['quads']:
            quad_copy = {}
            for key, component in quad.items():
                if key == 'predicate':
                    quad_copy[key] = component
                else:
                    quad_copy[key] = self.modify_first_degree_component(
                        id_, component, key)
            nquads.append(serialize_nquad(quad_copy))

        nquads.sort()
        info['hash'] = self.hash_nquads(nquads)
        return info['hash']

    def modify_first_degree_component(self, id_, component, key):
        if component['type'] != 'blank node':
            return component
        return {
            'type': 'blank node',
            'value': '_:a' if component['value'] == id_ else '_:z'
        }

    def hash_related_blank_node(self, related, quad, namer, position):
        """
        Hashes a blank node related to another through a quad, using its
        canonical label, its label in the current path or its first degree
        hash, in that order of preference.
        """
        if self.canonical_namer.is_named(related):
            id_ = self.canonical_namer.get_name(related)
        elif namer.is_named(related):
            id_ = namer.get_name(related)
        else:
            id_ = self.hash_first_degree_quads(related)

        md = self.create_hash()
        md.update(position.encode('utf8'))
        if position != 'g':
            md.update(self.get_related_predicate(quad).encode('utf8'))
        md.update(id_.encode('utf8'))
        return md.hexdigest()

    def get_related_predicate(self, quad):
        return '<' + quad['predicate']['value'] + '>'

    def hash_n_degree_quads(self, id_, namer):
        """
        Hashes a blank node together with the paths to the blank nodes it is
        related to, trying each ordering of related nodes that share a hash
        and keeping the lexicographically least path.

        :param id_: the blank node to hash.
        :param namer: the path namer, labeling blank nodes as they are
          visited.

        :return: a dict with the 'hash' and the chosen path 'namer'.

        :raises NormalizeError: when more than max_permutations
          permutations would be tried.
        """
        hash_to_related = self.create_hash_to_related(id_, namer)

        md = self.create_hash()
        for hash_, blank_nodes in sorted(hash_to_related.items()):
            md.update(hash_.encode('utf8'))
            chosen_path = ''
            chosen_namer = None

            for permutation in itertools.permutations(sorted(blank_nodes)):
                self._count_permutation()
                namer_copy = namer.clone()
                path = ''
                recursion_list = []

                skip = False
                for related in permutation:
                    if self.canonical_namer.is_named(related):
                        path += self.canonical_namer.get_name(related)
                    else:
                        if not namer_copy.is_named(related):
                            recursion_list.append(related)
                        path += namer_copy.get_name(related)

                    if _longer_path(path, chosen_path):
                        skip = True
                        break
                if skip:
                    continue

                for related in recursion_list:
                    result = self.hash_n_degree_quads(related, namer_copy)
                    path += namer_copy.get_name(related)
                    path += '<' + result['hash'] + '>'
                    namer_copy = result['namer']

                    if _longer_path(path, chosen_path):
                        skip = True
                        break
                if skip:
                    continue

                if not chosen_path or path < chosen_path:
                    chosen_path = path
                    chosen_namer = namer_copy

            md.update(chosen_path.encode('utf8'))
            namer = chosen_namer

        return {'hash': md.hexdigest(), 'namer': namer}

    def _count_permutation(self):
        self.permutation_count += 1
        if (self.max_permutations is not None and
                self.permutation_count > self.max_permutations):
            raise NormalizeError(
                'Maximum number of blank node permutations exceeded during '
                'normalization.',
                details={'maxPermutations': self.max_permutations},
                code='permutation limit exceeded')

    def create_hash_to_related(self, id_, namer):
        hash_to_related = {}
        for quad in self.blank_node_info[id_]['quads']:
            for key, component in quad.items():
                if (key != 'predicate' and
                        component['type'] == 'blank node' and
                        component['value'] != id_):
                    related = component['value']
                    hash_ = self.hash_related_blank_node(
                        related, quad, namer, self.POSITIONS[key])
                    hash_to_related.setdefault(hash_, []).append(related)
        return hash_to_related

    def create_hash(self):
        return hashlib.sha256()

    def hash_nquads(self, nquads):
        md = self.create_hash()
        for nquad in nquads:
            md.update(nquad.encode('utf8'))
        return md.hexdigest()


class URGNA2012(URDNA2015):
    """
    URGNA2012 implements the URGNA2012 RDF Graph Normalization Algorithm.
    """

    def modify_first_degree_component(self, id_, component, key):
        if component['type'] != 'blank node':
            return component
        if key == 'name':
            return {'type': 'blank node', 'value': '_:g'}
        return URDNA2015.modify_first_degree_component(
            self, id_, component, key)

    def get_related_predicate(self, quad):
        return quad['predicate']['value']

    def create_hash_to_related(self, id_, namer):
        hash_to_related = {}
        for quad in self.blank_node_info[id_]['quads']:
            # a related blank node is the subject ('p') or, failing that,
            # the object ('r') of the quad
            if (quad['subject']['type'] == 'blank node' and
                    quad['subject']['value'] != id_):
                related = quad['subject']['value']
                position = 'p'
            elif (quad['object']['type'] == 'blank node' and
                    quad['object']['value'] != id_):
                related = quad['object']['value']
                position = 'r'
            else:
                continue

            hash_ = self.hash_related_blank_node(
                related, quad, namer, position)
            hash_to_related.setdefault(hash_, []).append(related)
        return hash_to_related

    def create_hash(self):
        return hashlib.sha1()


ALGORITHMS = {
    'URDNA2015': URDNA2015,
    'URGNA2012': URGNA2012
}


def _longer_path(path, chosen_path):
    return (len(chosen_path) != 0 and len(path) >= len(chosen_path) and
            path > chosen_path)
