from setuptools import setup, find_packages

setup(name="mwa-rtsprep", packages=find_packages(exclude=['tests', 'tests.*']),
      # scripts specify those that can be executed from command-line.
      scripts=['rtsprep/flagging/reflag_mwaf_files.py', 'rtsprep/transform/ms2uvfits.py',
               'rtsprep/transform/unphase_uvfits.py', 'rtsprep/metadata/no_flagged_tiles.py',
               'rtsprep/metadata/overwrite_metafits_delays.py'],
      version='0.2.3',
      python_requires='>=3.8',
      install_requires=['numpy', 'astropy', 'pyerfa', 'python-casacore', 'pyyaml', 'celery', 'kombu'],
      extras_require={'test': ['pytest', 'mock']},
      package_data={'rtsprep': ['default-rtsprep-conf.yml']},
      include_package_data=True
      )
