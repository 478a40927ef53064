# To install locally: pip install -e .
#
# To push a version through to pip.
#  - Make sure it installs correctly locally as above
#  - Update the version information in this file
# With twine:
#  - python setup.py sdist
#  - twine upload dist/*


from setuptools import setup, find_packages

from os import path
import io
import os
import subprocess

# in development set version to none and ...
PYPI_VERSION = "0.3.0"  # Note: don't add any dashes if you want to use conda, use b1 not .b1

# Return the git revision as a string (from numpy)

def git_version():

    def _minimal_ext_cmd(cmd):
        # construct minimal environment
        env = {}
        for k in ['SYSTEMROOT', 'PATH']:
            v = os.environ.get(k)
            if v is not None:
                env[k] = v
        # LANGUAGE is used on win32
        env['LANGUAGE'] = 'C'
        env['LANG'] = 'C'
        env['LC_ALL'] = 'C'
        out = subprocess.Popen(cmd, stdout = subprocess.PIPE, env=env).communicate()[0]
        return out

    try:
        out = _minimal_ext_cmd(['git', 'rev-parse', '--short', 'HEAD'])
        GIT_REVISION = out.strip().decode('ascii')
    except OSError:
        GIT_REVISION = "Unknown"

    return GIT_REVISION


if PYPI_VERSION is None:
    PYPI_VERSION = git_version()


this_directory = path.abspath(path.dirname(__file__))
with io.open(path.join(this_directory, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()


if __name__ == "__main__":
    setup(name = 'cartoplot',
          version           = PYPI_VERSION,
          description       = "Static and interactive maps from tabular and vector data: basemaps, choropleths, simple features and cartograms",
          long_description  = long_description,
          long_description_content_type='text/markdown',
          python_requires   = '>=3.9',
          install_requires  = ['numpy>=1.16.0',
                               'scipy>=1.0.0',
                               'shapely>=2.0',
                               'matplotlib',
                               'cartopy',
                               'geopandas',
                               'pandas',
                               'plotly>=5.24',
                               'mapclassify',
                               'pooch',
                               'pyyaml',
                               ],
          extras_require    = {'test': ['pytest']},
          packages          = find_packages(exclude=['test', 'test.*']),
          package_data      = {'cartoplot': ['logging_config.yaml']},
          include_package_data = True,
          entry_points      = {'console_scripts': ['cartoplot=cartoplot.__main__:main']},
          classifiers       = ['Programming Language :: Python :: 3',
                               'Programming Language :: Python :: 3.9',
                               'Programming Language :: Python :: 3.10',
                               'Programming Language :: Python :: 3.11',
                               'Programming Language :: Python :: 3.12',
                               'Programming Language :: Python :: 3.13'
                               ]
          )
