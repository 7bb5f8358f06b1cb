from app.utils.rate_limit import InMemoryCounter, RateLimiter, RedisCounter


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class FakePipeline:
    def __init__(self, client):
        self.client = client
        self.commands = []

    def set(self, *args, **kwargs):
        self.commands.append((self.client.set, args, kwargs))

    def incr(self, *args):
        self.commands.append((self.client.incr, args, {}))

    def execute(self):
        self.client.transactions += 1
        return [command(*args, **kwargs) for command, args, kwargs in self.commands]


class FakeRedis:
    def __init__(self):
        self.values = {}
        self.ttls = {}
        self.transactions = 0

    def pipeline(self, transaction=True):
        assert transaction
        return FakePipeline(self)

    def set(self, key, value, ex=None, nx=False):
        if nx and key in self.values:
            return None
        self.values[key] = int(value)
        if ex is not None:
            self.ttls[key] = ex
        return True

    def incr(self, key):
        self.values[key] = self.values.get(key, 0) + 1
        return self.values[key]

    def ttl(self, key):
        return self.ttls.get(key, -2)


def test_thirty_first_request_is_rejected_until_window_elapses():
    clock = FakeClock()
    limiter = RateLimiter(InMemoryCounter(60, clock=clock), limit=30, scope='api')

    results = [limiter.hit('user-1')[0] for _ in range(31)]
    assert results[:30] == [True] * 30
    assert results[30] is False

    clock.now += 59
    assert limiter.hit('user-1')[0] is False

    clock.now += 2
    assert limiter.hit('user-1') == (True, 29)


def test_identities_are_independent():
    limiter = RateLimiter(InMemoryCounter(60, clock=FakeClock()), limit=1, scope='api')
    assert limiter.hit('a')[0] is True
    assert limiter.hit('a')[0] is False
    assert limiter.hit('b')[0] is True


def test_retry_after():
    clock = FakeClock()
    limiter = RateLimiter(InMemoryCounter(900, clock=clock), limit=5, scope='auth')
    limiter.hit('x@example.com')
    clock.now += 300
    assert limiter.retry_after('x@example.com') == 601
    assert limiter.retry_after('nobody@example.com') == 0


def test_redis_counter_creates_key_with_expiry_in_one_transaction():
    client = FakeRedis()
    counter = RedisCounter(client, 60)
    assert counter.increment('api:u1') == 1
    assert client.ttls == {'ratelimit:api:u1': 60}
    assert client.transactions == 1

    client.ttls['ratelimit:api:u1'] = 42
    assert counter.increment('api:u1') == 2
    assert counter.reset_in('api:u1') == 42
