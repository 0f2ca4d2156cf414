from setuptools import find_packages, setup


def read_file(file):
    with open(file, 'rb') as fh:
        data = fh.read()
    return data.decode('utf-8')

setup(name='shp2geojson',
      version='1.0.0',
      description='Convert ESRI Shapefiles, including Big5 and other multi-byte dbf attributes, to WGS84 GeoJSON',
      long_description=read_file('README.md'),
      long_description_content_type='text/markdown',
      package_dir={'': 'src'},
      packages=find_packages('src'),
      license='MIT',
      zip_safe=False,
      keywords='gis geospatial geographic shapefile shapefiles geojson dbf big5',
      python_requires='>= 3.9',
      install_requires=['pyproj>=3.0'],
      extras_require={'test': ['pytest']},
      entry_points={'console_scripts': ['shp2geojson=shp2geojson.__main__:main']},
      classifiers=['Programming Language :: Python',
                   'Programming Language :: Python :: 3',
                   'Topic :: Scientific/Engineering :: GIS',
                   'Topic :: Software Development :: Libraries',
                   'Topic :: Software Development :: Libraries :: Python Modules'])
