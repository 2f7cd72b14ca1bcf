# autobright

Automatic screen brightness for the desktop. The package reads an ambient
light level, maps it to a 0–100 scale and smooths it with a pressure
filter, then turns it into a screen brightness. Changes the user makes by
hand are kept as an offset. Brightness changes made while the user is idle
(for example when the desktop dims the screen) are recognised and left
alone.

The package has no third-party dependencies.

## Building blocks

Each piece can be used on its own.

### Promises

`autobright.promise` provides a thread-safe, callback-based promise. All
asynchronous work in the package uses it.

```python
from autobright.promise import Promise, Result, resolved

result = Result()
promise = Promise(result)
promise.then(lambda value: print("got", value), lambda exc: print("failed", exc))
result.resolve(10)

resolved(5).chain(lambda value: value * 2)
```

A `Promise` can be built in three ways:

- from a `Result`, which is then bound to it;
- from an executor, a callable that receives a fresh `Result` to settle;
- from another promise, whose outcome it adopts.

The methods that register handlers:

- `then(on_resolved, on_rejected=None)` registers handlers. Without
  `on_rejected`, a rejection is not passed on to the returned promise.
- `grab(on_rejected)` registers an error handler only.
- `chain(fn)` registers a success handler and passes errors on.

A handler that returns a `Promise` is flattened into the chain.

Helper functions:

- `resolved(...)` and `rejected(exc)` build promises that are already
  settled.
- `resolve_all(promises, on_error)` resolves once every promise has
  settled.
- `log_exception(prefix)` returns a handler that writes rejections to
  standard error.

`autobright.retry.retry(fn, backoff=1000, factor=2, retries=3,
scheduler=None)` calls a promise-returning function again after each
rejection. It waits `backoff` milliseconds before the first retry and
multiplies the wait by `factor` each time. When the retries are used up,
its promise is rejected with the last exception. By default a timer thread
runs each retry; a `scheduler(delay_ms, callback)` can be passed instead.

### Signals

```python
from autobright.signals import Signal

changed = Signal()
handle = changed.connect(lambda: print("changed"))
changed()
changed.disconnect(handle)
```

Handlers run in the order they were connected. A handler may disconnect
itself, or another handler, while the signal is being emitted.
`handlers()` lists the connected handlers.

### Logging

`autobright.logger.Logger` writes lines with an optional prefix, at the
levels of `autobright.logger.Level` (`DEBUG`, `DEFAULT`, `INFO`, `WARN`,
`ERROR`):

- `log`, `debug`, `info` and `warn` write to standard output;
- `error` writes to standard error;
- other streams can be passed as `out` and `err`.

`format_exception` gives an exception's message, or `unknown` for
anything else.

### Light level filtering

```python
from autobright.filter import PressureFilter

light = PressureFilter()
light.set_value(40)
for level in (45, 60, 70, 72):
    print(light.filter(level))
```

The filter moves its value only once enough "pressure" in one direction
has built up. Short flickers in the sensor reading therefore do not change
the screen brightness. `update_debug_info` copies the pressure and the
filtered value into an `autobright.filter.DebugInfo`.

`autobright.core.normalize_light_level(light_level, unit)` maps a raw
reading to the 0–100 scale, given its `autobright.sensor.Unit`:

- vendor readings pass through unchanged;
- lux readings follow a logarithmic curve, with 1 lux and below giving 0
  and 1000 lux giving 100;
- an unknown unit raises `ValueError`.

## Services on the bus

Remote services are reached through `autobright.bus.BusProxy`, an abstract
class:

- concrete proxies implement `invoke` and `get_cached_property`;
- `get_property` and `set_property` are built on `invoke`;
- a proxy emits `properties_changed`, `signal_received` and
  `name_owner_changed`.

The module-level functions `call` and `ping` return a rejected promise
instead of raising. `BusError` carries a message, domain and code.

Each proxy class takes a factory. The factory is called with the bus,
service name, object path and interface name, and returns a promise of a
`BusProxy`:

- `autobright.brightness.BrightnessProxy` gives the screen brightness of
  the power settings service. It implements the abstract
  `BrightnessSource`.
- `autobright.sensor.SensorProxy` gives the ambient light level and its
  unit.
- `autobright.idle_monitor.IdleMonitorProxy` adds, removes and refreshes
  idle and user-active watches. Each watch is identified by its `Watch`
  object.

Each of these classes has a static `ping_service(factory)`.

`autobright.idle_aware.IdleAware` is a `BrightnessSource` that wraps a
brightness source and an idle monitor. While the user is idle it ignores
brightness changes made by others. If the brightness was changed behind
its back, it stops writing brightness (`Flags.DISABLED`) until the user is
active again, and then restores the brightness it last requested.

## Putting it together

`autobright.core.Autobright(brightness, sensor, store=None)` connects the
parts:

- it feeds each light reading through the filter into an
  `autobright.adapter.Adapter`;
- the adapter writes `value + offset` as the brightness;
- when an `autobright.settings.SettingsStore` is given, the offset is read
  from it and written back to it.

`connect()` returns a promise that settles once both the brightness and
the sensor are available.

`autobright.service.AutobrightService` runs an `Autobright` instance:

- it keeps a `DebugInfo` snapshot up to date while debugging is enabled.
  Enabling is reference counted with `enable_debug` and `disable_debug`.
- `on_name_acquired` connects the instance.
- `run()` blocks until `quit(status)` is called, or until a failure to
  connect or `on_name_lost` makes it quit, and then returns the status.

## What the package does not do

- **No bus connection.** `BusProxy` is abstract. The package has no
  implementation that talks to a real message bus, so a proxy factory
  must be supplied.
- **No bus registration.** `AutobrightService` does not own a bus name or
  export its debug state on a bus. The caller invokes `on_name_acquired`,
  `on_name_lost` and the debug methods.
- **No persistent settings.** `SettingsStore` keeps its values in memory
  only.
- **No command-line program.**

## Tests

The test suite uses pytest. Install the `test` extra to get it.