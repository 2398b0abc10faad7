#__init__
