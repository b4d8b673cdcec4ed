"""Piano mode sub-package; it holds no modules at present."""