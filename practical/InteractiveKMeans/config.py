import ml_collections


def get_config():
    config = ml_collections.ConfigDict()

    # data
    config.data = data = ml_collections.ConfigDict()
    data.n_samples = 300
    data.n_features = 2
    # points are drawn uniformly from [low, high) in every dimension
    data.low = -5.0
    data.high = 5.0

    # kmeans
    config.kmeans = kmeans = ml_collections.ConfigDict()
    kmeans.k = 3
    kmeans.init_method = "random"  # random, farthestFirst, kmeans++, manual
    kmeans.manual_centers = ml_collections.FieldReference(None, field_type=list)
    kmeans.tol = 1e-5
    kmeans.max_iterations = 300
    kmeans.seed = 0

    # logging
    config.logging = logging = ml_collections.ConfigDict()
    logging.log_path = ml_collections.FieldReference(None, field_type=str)

    # plotting
    config.plot = plot = ml_collections.ConfigDict()
    plot.show = True
    plot.pause = 0.5

    return config
