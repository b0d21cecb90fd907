__title__ = 'ucd_tools'
__description__ = 'Compiles Unicode Character Database files into compact static range, case, and fold tables'
__url__ = 'https://github.com/ucd-tools/ucd_tools'
__version__ = '2026.10.19'
__author__ = 'ucd_tools developers'
__author_email__ = 'ucd-tools@users.noreply.github.com'
