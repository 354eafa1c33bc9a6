# -*- coding: utf-8 -*-
__copyright__ = 'Copyright (c) 2026 the jsonld-core authors'
__license__ = 'BSD 3-Clause license'
__version__ = '0.4.0'
