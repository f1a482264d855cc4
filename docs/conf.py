# Configuration file for the Sphinx documentation builder.

# -- Project information -----------------------------------------------------
project = 'plasmapop'
copyright = '2026, plasmapop Contributors'
author = 'plasmapop Contributors'
release = '0.1.0'

# -- General configuration ---------------------------------------------------
extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
    'myst_parser',  # For Markdown support
]

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

# -- Options for HTML output -------------------------------------------------
html_theme = 'sphinx_rtd_theme'
html_static_path = ['_static']

# -- Extension configuration -------------------------------------------------
# MyST Parser settings
myst_enable_extensions = [
    "colon_fence",
    "deflist",
]
